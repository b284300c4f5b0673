import logging
from datetime import date
from typing import Callable, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from recurring_bills.client import BillsApiClient
from recurring_bills.config import Settings
from recurring_bills.dashboard import RecurringBillsDashboard
from recurring_bills.engine import WEEKDAY_LABELS, due_date_message
from recurring_bills.errors import AuthorizationError, BillNotFoundError, ValidationError
from recurring_bills.formatting import CURRENCIES, CurrencyFormatter, format_date
from recurring_bills.models import (
    BillCategory,
    BillStatus,
    FilterState,
    SortOption,
    TimeFrame,
    Viewport,
)
from recurring_bills.preferences import CurrencyPreferenceStore
from recurring_bills.summarizer import BillSummarizer
from recurring_bills.validation import BillForm, validate_bill_form

settings = Settings.from_env()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def bearer_token() -> Optional[str]:
    """Return the bearer token sent by the browser, if any."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def parse_viewport(args) -> Viewport:
    """Resolve the viewport class from ``viewport`` or a pixel ``width``."""
    if args.get('viewport'):
        try:
            return Viewport(args['viewport'])
        except ValueError:
            raise ValidationError(f"Unknown viewport: {args['viewport']}", 'viewport')
    if args.get('width'):
        try:
            return Viewport.from_width(int(args['width']))
        except ValueError:
            raise ValidationError("width must be an integer", 'width')
    return Viewport.WIDE


def failure(message, status_code, field=None):
    body = {"is_success": False, "error": message}
    if field:
        body["field"] = field
    return jsonify(body), status_code


def dashboard_failure(dashboard: RecurringBillsDashboard):
    """Map the dashboard's last error to an HTTP response."""
    cause = dashboard.error_cause
    logger.warning(f"Dashboard request failed: {dashboard.error}")
    if isinstance(cause, AuthorizationError):
        return failure(dashboard.error, 401)
    if isinstance(cause, BillNotFoundError):
        return failure(dashboard.error, 404)
    return failure(dashboard.error, 502)


def create_app(
    app_settings: Optional[Settings] = None,
    client_factory: Optional[Callable[[Optional[str]], BillsApiClient]] = None,
    clock: Callable[[], date] = date.today
) -> Flask:
    """Build the dashboard API.

    Args:
        app_settings: Application settings; read from the environment
            at import time when omitted.
        client_factory: Builds an API client from the caller's bearer
            token; defaults to a BillsApiClient against BILLS_API_URL.
        clock: Source of the current date.
    """
    app_settings = app_settings or settings
    app = Flask(__name__)
    CORS(app)

    if client_factory is None:
        if not app_settings.api_url:
            logger.warning("BILLS_API_URL is not set; bills API calls will fail")

        def client_factory(token):
            return BillsApiClient(
                app_settings.api_url or '',
                token,
                timeout=app_settings.api_timeout,
                prefix=app_settings.api_prefix,
            )

    preferences = CurrencyPreferenceStore(
        app_settings.preferences_file, app_settings.default_currency
    )
    summarizer = BillSummarizer()

    def open_dashboard() -> RecurringBillsDashboard:
        return RecurringBillsDashboard(client_factory(bearer_token()), clock=clock)

    def formatter_for(user_id: Optional[str]) -> CurrencyFormatter:
        if not user_id:
            return CurrencyFormatter(preferences.default)
        return CurrencyFormatter(preferences.get(user_id))

    def render_bill(bill, today, formatter):
        data = bill.to_dict()
        data['due_message'] = due_date_message(bill, today)
        data['formatted_amount'] = formatter.format(bill.amount)
        data['formatted_due_date'] = format_date(bill.due_date)
        return data

    def render_page(page, today, formatter):
        return {
            "page": page.page,
            "page_size": page.page_size,
            "total_pages": page.total_pages,
            "bills": [render_bill(b, today, formatter) for b in page.bills],
        }

    def validated_form():
        data = request.get_json(silent=True) or {}
        form = BillForm.from_dict(data)
        validate_bill_form(form, clock())
        return form

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return failure(e.message, 400, e.field)

    @app.route('/dashboard/bills', methods=['GET'])
    def list_bills():
        """Filtered, sorted and paginated list and grid views."""
        filter_state = FilterState.from_query(request.args)
        viewport = parse_viewport(request.args)
        formatter = formatter_for(request.args.get('user'))

        dashboard = open_dashboard()
        if not dashboard.load():
            return dashboard_failure(dashboard)

        today = dashboard.today
        view = dashboard.view(filter_state, viewport)
        return jsonify({
            "is_success": True,
            "data": {
                "filtered_count": view.filtered_count,
                "no_results": view.no_results,
                "list": render_page(view.list_page, today, formatter),
                "grid": render_page(view.grid_page, today, formatter),
                "categories": [c.value for c in dashboard.engine.categories()],
                "statistics": dashboard.statistics().to_dict(),
            }
        }), 200

    @app.route('/dashboard/stats', methods=['GET'])
    def bill_statistics():
        """Headline cards and category breakdown."""
        formatter = formatter_for(request.args.get('user'))

        dashboard = open_dashboard()
        if not dashboard.load():
            return dashboard_failure(dashboard)

        stats = dashboard.statistics()
        return jsonify({
            "is_success": True,
            "data": {
                "statistics": stats.to_dict(),
                "stat_cards": summarizer.stat_cards(stats, formatter),
                "category_breakdown": summarizer.category_breakdown(dashboard.bills),
                "summary": summarizer.get_formatted_summary(stats, formatter),
            }
        }), 200

    @app.route('/dashboard/calendar', methods=['GET'])
    def bill_calendar():
        """Five-week calendar of the filtered bills for the current month."""
        filter_state = FilterState.from_query(request.args)
        formatter = formatter_for(request.args.get('user'))

        dashboard = open_dashboard()
        if not dashboard.load():
            return dashboard_failure(dashboard)

        today = dashboard.today
        cells = [
            {
                "date": cell.day.isoformat(),
                "day": cell.day.day,
                "in_current_month": cell.in_current_month,
                "is_today": cell.is_today,
                "bills": [render_bill(b, today, formatter) for b in cell.bills],
            }
            for cell in dashboard.calendar(filter_state)
        ]
        return jsonify({
            "is_success": True,
            "data": {"weekdays": list(WEEKDAY_LABELS), "days": cells}
        }), 200

    @app.route('/dashboard/options', methods=['GET'])
    def form_options():
        """Choices offered by the add/edit form and the filter bar."""
        return jsonify({
            "is_success": True,
            "data": {
                "categories": [c.value for c in BillCategory.selectable()],
                "statuses": [s.value for s in BillStatus],
                "time_frames": [t.value for t in TimeFrame],
                "sort_options": [s.value for s in SortOption],
                "currencies": [
                    {"code": c.code, "symbol": c.symbol, "name": c.name}
                    for c in CURRENCIES.values()
                ],
            }
        }), 200

    @app.route('/dashboard/bills', methods=['POST'])
    def add_bill():
        form = validated_form()
        dashboard = open_dashboard()
        bill = dashboard.add_bill(form)
        if bill is None:
            return dashboard_failure(dashboard)
        return jsonify({"is_success": True, "data": bill.to_dict()}), 201

    @app.route('/dashboard/bills/<bill_id>', methods=['PUT'])
    def edit_bill(bill_id):
        form = validated_form()
        dashboard = open_dashboard()
        if not dashboard.load():
            return dashboard_failure(dashboard)
        bill = dashboard.edit_bill(bill_id, form)
        if bill is None:
            return dashboard_failure(dashboard)
        return jsonify({"is_success": True, "data": bill.to_dict()}), 200

    @app.route('/dashboard/bills/<bill_id>/pay', methods=['POST'])
    def mark_as_paid(bill_id):
        dashboard = open_dashboard()
        if not dashboard.load():
            return dashboard_failure(dashboard)
        bill = dashboard.mark_as_paid(bill_id)
        if bill is None:
            return dashboard_failure(dashboard)
        return jsonify({"is_success": True, "data": bill.to_dict()}), 200

    @app.route('/dashboard/bills/<bill_id>', methods=['DELETE'])
    def delete_bill(bill_id):
        dashboard = open_dashboard()
        if not dashboard.load():
            return dashboard_failure(dashboard)
        if not dashboard.delete_bill(bill_id):
            return dashboard_failure(dashboard)
        return jsonify({"is_success": True}), 200

    @app.route('/preferences/currency', methods=['GET'])
    def get_currency_preference():
        user_id = request.args.get('user')
        if not user_id:
            return failure("Missing 'user' query parameter", 400, 'user')
        currency = preferences.get(user_id)
        return jsonify({"is_success": True, "data": {"currency": currency.code}}), 200

    @app.route('/preferences/currency', methods=['PUT'])
    def set_currency_preference():
        data = request.get_json(silent=True) or {}
        if not data.get('user'):
            return failure("Missing 'user' field in request body", 400, 'user')
        try:
            currency = preferences.set(str(data['user']), data.get('currency'))
        except ValueError as e:
            return failure(str(e), 400, 'currency')
        return jsonify({"is_success": True, "data": {"currency": currency.code}}), 200

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({"status": "healthy"}), 200

    return app


app = create_app()


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port, debug=settings.debug)
