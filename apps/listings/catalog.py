"""
Catalog query layer
Builds filter predicates and ordering for vehicle / part browsing.
All filtering, sorting and counting is left to the database.
"""

from django.db.models import Q

from core.utils import parse_amount, parse_bool

from .models import ListingKind, ListingStatus


# Public sort keys -> ORM ordering
SORT_OPTIONS = {
    'price': 'price',
    '-price': '-price',
    'year': 'year',
    '-year': '-year',
    'createdAt': 'created_at',
    '-createdAt': '-created_at',
    'views': '-views',
}

DEFAULT_SORT = '-createdAt'

# Sort keys that only make sense for one kind of listing
KIND_ONLY_SORTS = {
    'year': ListingKind.VEHICLE,
    '-year': ListingKind.VEHICLE,
}


def _int_param(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def build_filters(params, kind) -> Q:
    """
    Translate query-string params into a Q predicate

    Unknown or malformed values are ignored rather than rejected, so a
    stale client link still returns results.
    """
    status = params.get('status') or ListingStatus.ACTIVE
    predicate = Q(status=status) if status in ListingStatus.values else Q(status=ListingStatus.ACTIVE)

    search = (params.get('q') or '').strip()
    if search:
        text = Q(title__icontains=search) | Q(description__icontains=search)
        if kind == ListingKind.VEHICLE:
            text |= Q(make__icontains=search) | Q(model__icontains=search)
        else:
            text |= Q(part_name__icontains=search) | Q(brand__icontains=search) | Q(part_number__iexact=search)
        predicate &= text

    min_price = parse_amount(params.get('minPrice'))
    if min_price is not None:
        predicate &= Q(price__gte=min_price)

    max_price = parse_amount(params.get('maxPrice'))
    if max_price is not None:
        predicate &= Q(price__lte=max_price)

    for param, field in (('condition', 'condition'), ('city', 'city__iexact'), ('country', 'country__iexact')):
        value = params.get(param)
        if value:
            predicate &= Q(**{field: value})

    open_to_swap = parse_bool(params.get('openToSwap'))
    if open_to_swap is not None:
        predicate &= Q(open_to_swap=open_to_swap)

    if kind == ListingKind.VEHICLE:
        if params.get('make'):
            predicate &= Q(make__iexact=params['make'])
        if params.get('model'):
            predicate &= Q(model__iexact=params['model'])

        min_year = _int_param(params.get('minYear'))
        if min_year is not None:
            predicate &= Q(year__gte=min_year)

        max_year = _int_param(params.get('maxYear'))
        if max_year is not None:
            predicate &= Q(year__lte=max_year)

    elif kind == ListingKind.PART:
        if params.get('category'):
            predicate &= Q(category=params['category'])
        if params.get('brand'):
            predicate &= Q(brand__iexact=params['brand'])

    return predicate


def build_ordering(sort, kind):
    """
    Featured first, then boosted, then the requested sort key
    Falls back to newest first for keys outside the allow-list
    """
    if sort not in SORT_OPTIONS or KIND_ONLY_SORTS.get(sort, kind) != kind:
        sort = DEFAULT_SORT

    ordering = ['-is_featured', '-is_boosted', SORT_OPTIONS[sort]]
    if SORT_OPTIONS[sort] not in ('created_at', '-created_at'):
        ordering.append('-created_at')
    return ordering


def search_listings(model, params):
    """Filtered, ordered queryset for a listing model"""
    kind = model.kind
    return (
        model.objects
        .filter(build_filters(params, kind))
        .select_related('seller')
        .order_by(*build_ordering(params.get('sort'), kind))
    )
