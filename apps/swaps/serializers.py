from apps.listings.serializers import serialize_listing_summary


def serialize_swap(swap, include_items=True):
    data = {
        'id': str(swap.id),
        'status': swap.status,
        'initiatorId': str(swap.initiator_id),
        'receiverId': str(swap.receiver_id),
        'initiator': swap.initiator.summary(),
        'receiver': swap.receiver.summary(),
        'offeredItemType': swap.offered_item_type,
        'offeredItemId': str(swap.offered_item_id),
        'requestedItemType': swap.requested_item_type,
        'requestedItemId': str(swap.requested_item_id),
        'message': swap.message,
        'additionalCash': swap.additional_cash,
        'currency': swap.currency,
        'responseNote': swap.response_note,
        'respondedAt': swap.responded_at,
        'completedAt': swap.completed_at,
        'createdAt': swap.created_at,
        'updatedAt': swap.updated_at,
    }

    if include_items:
        data['offeredItem'] = serialize_listing_summary(swap.offered_item)
        data['requestedItem'] = serialize_listing_summary(swap.requested_item)

    return data
