import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal

from tailorbook.core.utils import create_audit_log, json_safe
from tailorbook.shops.permissions import HasShop
from .filters import ExpenseFilter
from .models import Expense, ExpenseCategory
from .serializers import ExpenseSerializer

logger = logging.getLogger('tailorbook.expenses')


def _filtered_expenses(request):
    return ExpenseFilter(request.query_params, queryset=Expense.objects.filter(shop=request.shop))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasShop])
def expense_list_create(request):
    """List the shop's expenses, newest first, or record a new one"""
    if request.method == 'GET':
        filterset = _filtered_expenses(request)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ExpenseSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = ExpenseSerializer(data=request.data)
    if serializer.is_valid():
        expense = serializer.save(shop=request.shop)
        create_audit_log(request, 'create', 'Expense', expense.id, json_safe(serializer.data), object_name=expense.item_name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasShop])
def expense_detail(request, pk):
    """Retrieve, update or delete an expense"""
    expense = get_object_or_404(Expense, pk=pk, shop=request.shop)

    if request.method == 'GET':
        return Response(ExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Expense', expense.id, json_safe(dict(serializer.validated_data)),
                             object_name=expense.item_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        expense_id = expense.id
        item_name = expense.item_name
        expense.delete()
        create_audit_log(request, 'delete', 'Expense', expense_id, object_name=item_name)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasShop])
def expense_summary(request):
    """Totals over the filtered expenses: overall, this month and per category"""
    filterset = _filtered_expenses(request)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    expenses = filterset.qs

    today = timezone.localdate()
    total = expenses.aggregate(total=Sum('amount'))['total'] or Decimal('0')
    monthly = expenses.filter(date__year=today.year, date__month=today.month).aggregate(total=Sum('amount'))['total'] or Decimal('0')

    labels = dict(ExpenseCategory.choices)
    by_category = []
    for row in expenses.values('category').annotate(total=Sum('amount')).order_by('-total'):
        if row['total']:
            by_category.append({
                'category': row['category'],
                'label': labels.get(row['category'], row['category']),
                'total': float(row['total']),
            })

    return Response({
        'total': float(total),
        'this_month': float(monthly),
        'count': expenses.count(),
        'by_category': by_category,
    })
