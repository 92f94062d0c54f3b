import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from django_filters.utils import translate_validation
from keyshop.core.access import require_role
from keyshop.core.models import Role
from keyshop.core.utils import create_audit_log
from .dashboard_cache import get_dashboard_summary
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer

logger = logging.getLogger(__name__)

# Reads are open to any signed-in user, writes need the admin role
AdminWrites = require_role(Role.ADMIN, methods=['POST', 'PUT', 'PATCH', 'DELETE'])


def _product_changes(serializer, instance=None):
    """Field-level diff for the audit log"""
    changes = {}
    for field, new_value in serializer.validated_data.items():
        old_value = getattr(instance, field, None) if instance is not None else None
        if instance is None or old_value != new_value:
            changes[field] = {'old': str(old_value) if old_value is not None else None, 'new': str(new_value)}
    return changes


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Catalog totals and stock status counts"""
    return Response(get_dashboard_summary())


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminWrites])
def product_list_create(request):
    """List products (filterable) or create a new product"""
    if request.method == 'GET':
        product_filter = ProductFilter(request.query_params, queryset=Product.objects.all())
        if not product_filter.is_valid():
            raise translate_validation(product_filter.errors)
        serializer = ProductSerializer(product_filter.qs, many=True)
        return Response(serializer.data)

    serializer = ProductSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        changes = _product_changes(serializer)
        product = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Product',
            object_id=product.id,
            object_name=product.name,
            changes=changes,
        )
    logger.info(f"User {request.user.username} created product {product.id} ({product.name})")
    return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, AdminWrites])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        with transaction.atomic():
            changes = _product_changes(serializer, product)
            product = serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=product.id,
                object_name=product.name,
                changes=changes,
            )
        return Response(ProductSerializer(product).data)

    # DELETE
    product_id = product.id
    product_name = product.name
    with transaction.atomic():
        product.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Product',
            object_id=product_id,
            object_name=product_name,
        )
    logger.info(f"User {request.user.username} deleted product {product_id} ({product_name})")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_categories(request):
    """Distinct category labels in use"""
    categories = (
        Product.objects.order_by('category')
        .values_list('category', flat=True)
        .distinct()
    )
    return Response(list(categories))
