"""
Test suite for the measurement catalog, override resolver and custom measurements
"""
from decimal import Decimal

from django.core.checks import run_checks
from django.test import SimpleTestCase, TestCase
from rest_framework import status

from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .catalog import (
    DEFAULT_MEASUREMENTS, GARMENT_MEASUREMENTS, Gender, extract_order_measurements,
    find_catalog_inconsistencies, get_default_measurements_for_gender, get_garment_label,
    get_garment_types_for_gender, get_required_measurements_for_garment, initialize_default_measurements,
)
from .custom import CustomMeasurementSet, custom_field_key
from .exceptions import InvalidMeasurementValue, UnknownMeasurementField
from .resolver import (
    MeasurementSession, Provenance, ResolutionState, parse_measurement_value, resolve_measurements,
)

GOWN_CUSTOMER = {
    'bust': 36, 'waist': 28, 'hip': 40, 'shoulder': 15,
    'gownLength': 58, 'sleeveLength': 22, 'backLength': 16,
}


class CatalogTests(SimpleTestCase):
    """Garment catalog and requirement table lookups"""

    def test_garment_types_per_gender(self):
        female = [garment.value for garment in get_garment_types_for_gender(Gender.FEMALE)]
        male = [garment.value for garment in get_garment_types_for_gender('male')]
        self.assertEqual(female, ['boubou', 'gown', 'wrapper-blouse', 'skirt-blouse', 'trousers', 'jumpsuit'])
        self.assertEqual(male, ['kaftan', 'senator', 'agbada', 'shirt-trousers', 'trousers', 'dashiki'])

    def test_unknown_gender_gives_empty_results(self):
        self.assertEqual(get_garment_types_for_gender('other'), [])
        self.assertEqual(dict(get_default_measurements_for_gender('other')), {})
        self.assertEqual(get_garment_types_for_gender(None), [])

    def test_field_labels_and_units(self):
        male = get_default_measurements_for_gender('male')
        self.assertEqual(male['chest'].label, 'Chest / Body')
        self.assertEqual(male['thigh'].label, 'Thigh / Lap')
        units = {field.unit for fields in DEFAULT_MEASUREMENTS.values() for field in fields.values()}
        self.assertEqual(units, {'inches'})

    def test_catalog_tables_are_read_only(self):
        with self.assertRaises(TypeError):
            DEFAULT_MEASUREMENTS['male'] = {}
        with self.assertRaises(TypeError):
            GARMENT_MEASUREMENTS['female']['gown'] = ()

    def test_required_measurements_for_gown(self):
        self.assertEqual(
            get_required_measurements_for_garment('female', 'gown'),
            ['bust', 'waist', 'hip', 'shoulder', 'gownLength', 'sleeveLength', 'backLength'],
        )

    def test_required_measurements_lookup_is_deterministic(self):
        first = get_required_measurements_for_garment('male', 'senator')
        second = get_required_measurements_for_garment('male', 'senator')
        self.assertEqual(first, second)
        first.append('neck')
        self.assertNotIn('neck', get_required_measurements_for_garment('male', 'senator'))

    def test_unknown_garment_requires_nothing(self):
        self.assertEqual(get_required_measurements_for_garment('male', 'unknown-type'), [])
        self.assertEqual(get_required_measurements_for_garment('female', 'kaftan'), [])
        self.assertEqual(get_required_measurements_for_garment(None, 'gown'), [])

    def test_requirements_reference_defined_fields(self):
        self.assertEqual(find_catalog_inconsistencies(), [])
        for gender, garments in GARMENT_MEASUREMENTS.items():
            known = get_default_measurements_for_gender(gender)
            for fields in garments.values():
                for field in fields:
                    self.assertIn(field, known)

    def test_catalog_system_check_is_clean(self):
        messages = [message for message in run_checks() if (message.id or '').startswith('measurements.')]
        self.assertEqual(messages, [])

    def test_garment_label(self):
        self.assertEqual(get_garment_label('female', 'wrapper-blouse'), 'Wrapper & Blouse')
        self.assertEqual(get_garment_label('male', 'mystery'), 'mystery')


class InitializerTests(SimpleTestCase):
    """Zero-filled sets and order seeding"""

    def test_initializer_covers_exactly_the_gender_fields(self):
        for gender in Gender.values:
            values = initialize_default_measurements(gender)
            self.assertEqual(set(values), set(get_default_measurements_for_gender(gender)))
            self.assertTrue(all(value == 0 for value in values.values()))

    def test_initializer_returns_a_fresh_dict(self):
        values = initialize_default_measurements('male')
        values['chest'] = 40
        self.assertEqual(initialize_default_measurements('male')['chest'], 0)

    def test_initializer_for_unknown_gender(self):
        self.assertEqual(initialize_default_measurements(''), {})

    def test_extract_order_measurements_copies_required_fields_only(self):
        customer = dict(GOWN_CUSTOMER, neck=14, knee=18)
        seeded = extract_order_measurements(customer, 'female', 'boubou')
        self.assertEqual(seeded, {'bust': 36, 'shoulder': 15, 'sleeveLength': 22, 'gownLength': 58})

    def test_extract_order_measurements_fills_missing_with_zero(self):
        seeded = extract_order_measurements({'shoulder': 18}, 'male', 'kaftan')
        self.assertEqual(seeded, {'shoulder': 18, 'chest': 0, 'sleeveLength': 0, 'topLength': 0})


class ParseMeasurementValueTests(SimpleTestCase):
    """User input to measurement numbers"""

    def test_blank_input_is_zero(self):
        self.assertEqual(parse_measurement_value(None), 0)
        self.assertEqual(parse_measurement_value(''), 0)
        self.assertEqual(parse_measurement_value('   '), 0)

    def test_numbers_and_numeric_strings(self):
        self.assertEqual(parse_measurement_value(38), 38)
        self.assertEqual(parse_measurement_value('38.5'), 38.5)
        self.assertEqual(parse_measurement_value(' 12 '), 12.0)
        self.assertEqual(parse_measurement_value(Decimal('14.25')), 14.25)

    def test_invalid_input_raises(self):
        for raw in ['abc', 'nan', 'inf', -1, '-2.5', float('inf'), True, [36], {'v': 1}]:
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidMeasurementValue):
                    parse_measurement_value(raw, 'bust')

    def test_error_names_the_field(self):
        with self.assertRaisesMessage(InvalidMeasurementValue, "'waist'"):
            parse_measurement_value('wide', 'waist')


class ResolverTests(SimpleTestCase):
    """Merging customer defaults with order values"""

    def test_unconfigured_without_gender_or_garment(self):
        self.assertEqual(resolve_measurements(None, 'gown', GOWN_CUSTOMER).state, ResolutionState.UNCONFIGURED)
        self.assertEqual(resolve_measurements('female', '', GOWN_CUSTOMER).state, ResolutionState.UNCONFIGURED)
        self.assertEqual(resolve_measurements('female', None).fields, {})

    def test_no_requirements_for_unknown_garment(self):
        resolved = resolve_measurements('male', 'unknown-type', {'chest': 40})
        self.assertEqual(resolved.state, ResolutionState.NO_REQUIREMENTS)
        self.assertEqual(resolved.values(), {})

    def test_gown_without_overrides_uses_customer_defaults(self):
        resolved = resolve_measurements('female', 'gown', GOWN_CUSTOMER, {})
        self.assertEqual(resolved.state, ResolutionState.READY)
        self.assertEqual(resolved.values(), GOWN_CUSTOMER)
        self.assertEqual(list(resolved.values()), get_required_measurements_for_garment('female', 'gown'))
        self.assertTrue(all(badge == Provenance.DEFAULT for badge in resolved.badges().values()))
        self.assertFalse(resolved.has_missing_customer_measurements)

    def test_gown_with_waist_override(self):
        resolved = resolve_measurements('female', 'gown', GOWN_CUSTOMER, {'waist': 30})
        self.assertEqual(resolved.values()['waist'], 30)
        self.assertEqual(resolved.badges()['waist'], Provenance.EDITED)
        others = {field: badge for field, badge in resolved.badges().items() if field != 'waist'}
        self.assertTrue(all(badge == Provenance.DEFAULT for badge in others.values()))

    def test_order_value_equal_to_default_is_default(self):
        resolved = resolve_measurements('female', 'gown', GOWN_CUSTOMER, {'bust': 36.0})
        self.assertEqual(resolved.badges()['bust'], Provenance.DEFAULT)

    def test_null_order_value_counts_as_absent(self):
        resolved = resolve_measurements('female', 'gown', GOWN_CUSTOMER, {'bust': None})
        self.assertEqual(resolved.fields['bust'].value, 36)
        self.assertEqual(resolved.fields['bust'].provenance, Provenance.DEFAULT)

    def test_missing_customer_fields_are_zero_and_reported(self):
        resolved = resolve_measurements('male', 'kaftan', {'shoulder': 18, 'chest': 0})
        self.assertEqual(resolved.values(), {'shoulder': 18, 'chest': 0, 'sleeveLength': 0, 'topLength': 0})
        self.assertEqual(resolved.missing_fields, ['chest', 'sleeveLength', 'topLength'])
        self.assertTrue(resolved.has_missing_customer_measurements)

    def test_fields_outside_the_garment_are_ignored(self):
        resolved = resolve_measurements('male', 'kaftan', {'shoulder': 18}, {'neck': 15, 'shoulder': 19})
        self.assertNotIn('neck', resolved.values())
        self.assertEqual(resolved.values()['shoulder'], 19)

    def test_resolution_is_idempotent(self):
        first = resolve_measurements('female', 'gown', GOWN_CUSTOMER, {'waist': 30})
        second = resolve_measurements('female', 'gown', GOWN_CUSTOMER, first.values())
        self.assertEqual(first, second)


class MeasurementSessionTests(SimpleTestCase):
    """Edits and resets in the order measurement editor"""

    def setUp(self):
        self.session = MeasurementSession('female', 'gown', GOWN_CUSTOMER, {})

    def test_edit_marks_field_edited(self):
        values = self.session.edit('bust', '38')
        self.assertEqual(values['bust'], 38.0)
        self.assertEqual(self.session.badges()['bust'], Provenance.EDITED)
        self.assertEqual(set(values), set(GOWN_CUSTOMER))

    def test_editing_back_to_default_clears_edited(self):
        self.session.edit('bust', 38)
        self.session.edit('bust', 36)
        self.assertEqual(self.session.badges()['bust'], Provenance.DEFAULT)

    def test_edit_only_touches_one_field(self):
        self.session.edit('waist', 30)
        badges = self.session.badges()
        self.assertEqual(badges['waist'], Provenance.EDITED)
        self.assertEqual([field for field, badge in badges.items() if badge == Provenance.EDITED], ['waist'])

    def test_blank_edit_means_zero(self):
        values = self.session.edit('hip', '')
        self.assertEqual(values['hip'], 0)
        self.assertEqual(self.session.badges()['hip'], Provenance.EDITED)

    def test_invalid_edit_leaves_state_unchanged(self):
        with self.assertRaises(InvalidMeasurementValue):
            self.session.edit('bust', 'forty')
        self.assertEqual(self.session.values()['bust'], 36)

    def test_edit_of_field_not_required_raises(self):
        with self.assertRaises(UnknownMeasurementField):
            self.session.edit('inseam', 30)

    def test_update_validates_everything_first(self):
        with self.assertRaises(InvalidMeasurementValue):
            self.session.update({'bust': 40, 'waist': 'x'})
        self.assertEqual(self.session.values()['bust'], 36)

    def test_reset_to_default(self):
        self.session.edit('bust', 38)
        values = self.session.reset_to_default('bust')
        self.assertEqual(values['bust'], 36)
        self.assertEqual(self.session.badges()['bust'], Provenance.DEFAULT)

    def test_reset_all_to_defaults(self):
        self.session.edit('bust', 38)
        self.session.edit('waist', 31)
        values = self.session.reset_all_to_defaults()
        self.assertEqual(values, GOWN_CUSTOMER)
        self.assertEqual(set(self.session.badges().values()), {Provenance.DEFAULT})

    def test_session_for_unknown_garment_has_nothing_to_edit(self):
        session = MeasurementSession('male', 'unknown-type', {'chest': 40})
        self.assertEqual(session.state, ResolutionState.NO_REQUIREMENTS)
        self.assertEqual(session.reset_all_to_defaults(), {})
        with self.assertRaises(UnknownMeasurementField):
            session.edit('chest', 41)


class CustomMeasurementSetTests(SimpleTestCase):
    """Freeform per-order measurements"""

    def test_key_from_label(self):
        self.assertEqual(custom_field_key('Sleeve Slant'), 'sleeve_slant')
        self.assertEqual(custom_field_key('sleeve  slant'), 'sleeve_slant')
        self.assertEqual(custom_field_key('Cap\tHeight'), 'cap_height')

    def test_add_field_trims_label(self):
        custom = CustomMeasurementSet()
        key = custom.add_field('  Cuff Width ', '3.5')
        self.assertEqual(key, '_cuff_width_')
        self.assertEqual(custom[key], {'label': 'Cuff Width', 'value': 3.5})

    def test_labels_differing_in_case_and_spacing_collide(self):
        custom = CustomMeasurementSet()
        custom.add_field('Sleeve Slant', 2)
        custom.add_field('sleeve  slant', 3)
        self.assertEqual(len(custom), 1)
        self.assertEqual(custom['sleeve_slant'], {'label': 'sleeve  slant', 'value': 3})

    def test_blank_label_is_ignored(self):
        custom = CustomMeasurementSet()
        self.assertIsNone(custom.add_field('   ', 4))
        self.assertEqual(custom.to_dict(), {})

    def test_update_and_remove(self):
        custom = CustomMeasurementSet({'neck_drop': {'label': 'Neck Drop', 'value': 2}})
        custom.update_field('neck_drop', '2.5')
        self.assertEqual(custom['neck_drop']['value'], 2.5)
        self.assertEqual(custom['neck_drop']['label'], 'Neck Drop')
        custom.remove_field('neck_drop')
        custom.remove_field('neck_drop')
        self.assertNotIn('neck_drop', custom)

    def test_update_unknown_key_raises(self):
        with self.assertRaises(UnknownMeasurementField):
            CustomMeasurementSet().update_field('missing', 1)

    def test_invalid_value_raises(self):
        with self.assertRaises(InvalidMeasurementValue):
            CustomMeasurementSet().add_field('Armhole Depth', 'deep')


class MeasurementAPITests(TestCase):
    """Catalog and resolve preview endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_catalog_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/measurements/catalog/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_full_catalog(self):
        response = self.client.get('/api/v1/measurements/catalog/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['gender'] for entry in response.data['catalog']], ['male', 'female'])

    def test_gender_catalog(self):
        response = self.client.get('/api/v1/measurements/catalog/female/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['garment_types']), 6)
        self.assertEqual(len(response.data['fields']), 16)
        self.assertEqual(response.data['initial_measurements']['bust'], 0)

    def test_unknown_gender_catalog_is_empty(self):
        response = self.client.get('/api/v1/measurements/catalog/other/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['garment_types'], [])
        self.assertEqual(response.data['fields'], [])

    def test_garment_requirements(self):
        response = self.client.get('/api/v1/measurements/catalog/male/agbada/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['required_fields'], ['shoulder', 'chest', 'sleeveLength', 'agbadaLength'])
        self.assertEqual(response.data['fields'][1]['label'], 'Chest / Body')

    def test_resolve_preview(self):
        response = self.client.post('/api/v1/measurements/resolve/', {
            'gender': 'female',
            'garment_type': 'gown',
            'customer_measurements': {'bust': 36, 'waist': 28},
            'order_measurements': {'waist': 30},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'ready')
        fields = {field['key']: field for field in response.data['fields']}
        self.assertEqual(fields['waist']['provenance'], 'edited')
        self.assertEqual(fields['waist']['customer_value'], 28)
        self.assertEqual(fields['bust']['provenance'], 'default')
        self.assertIn('hip', response.data['missing_fields'])
        self.assertTrue(response.data['has_missing_customer_measurements'])

    def test_resolve_preview_unconfigured(self):
        response = self.client.post('/api/v1/measurements/resolve/', {'gender': 'male'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'unconfigured')
        self.assertEqual(response.data['fields'], [])

    def test_resolve_preview_unknown_gender(self):
        response = self.client.post('/api/v1/measurements/resolve/', {
            'gender': 'other',
            'garment_type': 'gown',
            'customer_measurements': {'bust': 36},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'no_requirements')
        self.assertEqual(response.data['fields'], [])
        self.assertEqual(response.data['missing_fields'], [])
