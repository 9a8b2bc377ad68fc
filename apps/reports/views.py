"""
Reports API views
Location: apps/reports/views.py
"""

from django.db.models import Count

from core.decorators import api_view
from core.responses import json_success
from core.utils import paginate, parse_json_body, validate_form

from apps.users.decorators import api_admin_required, api_login_required

from .forms import ReportForm, ResolveReportForm, UpdateReportForm
from .models import Report
from .serializers import serialize_report
from .services import ReportTarget, moderation_service


def _submit(request):
    data = validate_form(ReportForm.from_payload(parse_json_body(request)))

    report = moderation_service.submit(
        reporter=request.user,
        item_type=data['item_type'],
        item_id=data['item_id'],
        reason=data['reason'],
        description=data['description'],
    )

    return json_success({'report': serialize_report(report)}, message='Report submitted successfully', status=201)


@api_admin_required
def _admin_list(request):
    queryset = Report.objects.select_related('reporter')

    status = request.GET.get('status')
    if status:
        queryset = queryset.filter(status=status)

    item_type = request.GET.get('itemType')
    if item_type:
        queryset = queryset.filter(item_type=item_type)

    items, pagination = paginate(queryset, request)
    stats = {
        row['status']: row['count']
        for row in Report.objects.order_by().values('status').annotate(count=Count('id'))
    }

    return json_success(
        {'reports': [serialize_report(r) for r in items]},
        results=len(items),
        pagination=pagination,
        stats=stats,
    )


@api_view('GET', 'POST')
@api_login_required
def report_list(request):
    """
    POST: any user files a report
    GET: moderation queue (admin, ?status, ?itemType)
    """
    if request.method == 'POST':
        return _submit(request)
    return _admin_list(request)


@api_view('GET')
@api_login_required
def my_reports(request):
    reports = Report.objects.filter(reporter=request.user)
    return json_success({'reports': [serialize_report(r) for r in reports]}, results=len(reports))


@api_view('GET', 'PATCH', 'DELETE')
@api_admin_required
def report_detail(request, report_id):
    if request.method == 'PATCH':
        payload = parse_json_body(request)
        data = validate_form(UpdateReportForm.from_payload(payload))
        report = moderation_service.update_status(
            report_id,
            status=data['status'] or None,
            resolution=data['resolution'] if 'resolution' in payload else None,
        )
        return json_success({'report': serialize_report(report)}, message='Report updated successfully')

    if request.method == 'DELETE':
        moderation_service.delete(report_id)
        return json_success(message='Report deleted')

    report = moderation_service.get(report_id)
    target = ReportTarget(report.item_type, report.item_id)

    return json_success({
        'report': serialize_report(report),
        'itemExists': target.resolve() is not None,
    })


@api_view('POST')
@api_admin_required
def resolve_report(request, report_id):
    data = validate_form(ResolveReportForm.from_payload(parse_json_body(request)))
    report = moderation_service.resolve(report_id, request.user, data['action'], data['resolution'])
    return json_success({'report': serialize_report(report)}, message='Report resolved and action taken')


@api_view('POST')
@api_admin_required
def dismiss_report(request, report_id):
    data = parse_json_body(request)
    report = moderation_service.dismiss(report_id, request.user, data.get('resolution') or '')
    return json_success({'report': serialize_report(report)}, message='Report dismissed')
