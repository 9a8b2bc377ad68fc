def serialize_report(report):
    return {
        'id': str(report.id),
        'reporterId': str(report.reporter_id),
        'itemType': report.item_type,
        'itemId': str(report.item_id),
        'reason': report.reason,
        'description': report.description,
        'status': report.status,
        'action': report.action_taken,
        'resolution': report.resolution,
        'resolvedBy': str(report.resolved_by_id) if report.resolved_by_id else None,
        'resolvedAt': report.resolved_at,
        'createdAt': report.created_at,
        'updatedAt': report.updated_at,
    }
