"""
Catalog API views
Location: apps/listings/views.py
"""

from django.db.models import F

from core.decorators import api_view
from core.exceptions import NotFound
from core.responses import json_success
from core.utils import paginate

from .catalog import search_listings
from .models import Part, Vehicle, get_listing
from .serializers import serialize_listing


def _list(request, model, key):
    queryset = search_listings(model, request.GET)
    items, pagination = paginate(queryset, request)

    return json_success(
        {key: [serialize_listing(item) for item in items]},
        results=len(items),
        pagination=pagination,
    )


def _detail(request, model, listing_id):
    listing = get_listing(model.kind, listing_id)
    if listing is None:
        raise NotFound(f'{model._meta.verbose_name} not found')

    model.objects.filter(pk=listing.pk).update(views=F('views') + 1)
    listing.refresh_from_db(fields=['views'])

    return json_success({str(model.kind): serialize_listing(listing)})


# ==========================================
# VEHICLES
# ==========================================

@api_view('GET')
def vehicle_list(request):
    """Browse vehicles with filters, sort and pagination"""
    return _list(request, Vehicle, 'vehicles')


@api_view('GET')
def vehicle_detail(request, vehicle_id):
    return _detail(request, Vehicle, vehicle_id)


# ==========================================
# PARTS
# ==========================================

@api_view('GET')
def part_list(request):
    """Browse parts with filters, sort and pagination"""
    return _list(request, Part, 'parts')


@api_view('GET')
def part_detail(request, part_id):
    return _detail(request, Part, part_id)
