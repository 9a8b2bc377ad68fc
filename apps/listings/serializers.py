"""
Plain-dict serializers for listing payloads
"""

from .models import ListingKind


def serialize_listing_summary(listing):
    """Compact listing payload embedded in swaps, payments and reports"""
    if listing is None:
        return None

    summary = {
        'id': str(listing.id),
        'type': str(listing.kind),
        'title': listing.title,
        'price': listing.price,
        'currency': listing.currency,
        'status': listing.status,
        'image': listing.images[0] if listing.images else None,
    }

    if listing.kind == ListingKind.VEHICLE:
        summary.update({'make': listing.make, 'model': listing.model, 'year': listing.year})
    else:
        summary.update({'partName': listing.part_name, 'category': listing.category})

    return summary


def serialize_listing(listing):
    data = {
        **serialize_listing_summary(listing),
        'slug': listing.slug,
        'description': listing.description,
        'images': listing.images,
        'priceNegotiable': listing.price_negotiable,
        'openToSwap': listing.open_to_swap,
        'condition': listing.condition,
        'city': listing.city,
        'country': listing.country,
        'isFeatured': listing.is_featured,
        'featuredUntil': listing.featured_until,
        'isBoosted': listing.is_boosted,
        'boostedUntil': listing.boosted_until,
        'views': listing.views,
        'seller': listing.seller.summary(),
        'createdAt': listing.created_at,
        'updatedAt': listing.updated_at,
    }

    if listing.kind == ListingKind.VEHICLE:
        data.update({
            'mileage': listing.mileage,
            'bodyType': listing.body_type,
            'transmission': listing.transmission,
            'fuelType': listing.fuel_type,
        })
    else:
        data.update({
            'partNumber': listing.part_number,
            'brand': listing.brand,
            'compatibleMakes': listing.compatible_makes,
            'quantity': listing.quantity,
        })

    return data
