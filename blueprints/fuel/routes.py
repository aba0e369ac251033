from flask import request, jsonify, current_app, Response
from . import fuel_bp
from extensions import db
from services.fuel_record_service import FuelRecordService
from services.efficiency_service import EfficiencyService
from services.statistics_service import StatisticsService
from services.insight_service import InsightService
from services.validation_service import ValidationService
from services.export_service import ExportService
from services.import_service import ImportService


EXPORT_MIMETYPES = {
    'csv': 'text/csv; charset=utf-8',
    'json': 'application/json; charset=utf-8',
    'report': 'text/plain; charset=utf-8',
}


def _form_data():
    """Accept either a JSON object body or a regular form post"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def _records_payload(records):
    """Records in ascending order with derived figures alongside"""
    payload = []
    for record, point in zip(records, EfficiencyService.efficiency_series(records)):
        item = record.to_dict()
        item.update({
            'price_per_liter': point['price_per_liter'],
            'distance': point['distance'],
            'fuel_efficiency': point['efficiency'],
        })
        payload.append(item)
    return payload


# ===== RECORDS =====

@fuel_bp.route('/records')
def list_records():
    """Fuel log with derived efficiency, oldest first"""
    records = FuelRecordService.list_records()
    return jsonify({'records': _records_payload(records)})


@fuel_bp.route('/records', methods=['POST'])
def add_record():
    """Add a fuel record"""
    try:
        record, validation = FuelRecordService.create_record(_form_data())
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception('Error adding fuel record')
        return jsonify({'success': False, 'errors': [f'Error adding fuel record: {e}']}), 500

    if record is None:
        return jsonify({'success': False, **validation}), 400
    return jsonify({'success': True, 'record': record.to_dict(), 'warnings': validation['warnings']}), 201


@fuel_bp.route('/records/<int:record_id>/update', methods=['POST'])
def update_record(record_id):
    """Edit a fuel record; validated against the rest of the log"""
    try:
        record, validation = FuelRecordService.update_record(record_id, _form_data())
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f'Error updating fuel record {record_id}')
        return jsonify({'success': False, 'errors': [f'Error updating fuel record: {e}']}), 500

    if validation is None:
        return jsonify({'success': False, 'errors': ['Fuel record not found']}), 404
    if record is None:
        return jsonify({'success': False, **validation}), 400
    return jsonify({'success': True, 'record': record.to_dict(), 'warnings': validation['warnings']})


@fuel_bp.route('/records/<int:record_id>/delete', methods=['POST'])
def delete_record(record_id):
    """Delete a fuel record"""
    try:
        deleted = FuelRecordService.delete_record(record_id)
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f'Error deleting fuel record {record_id}')
        return jsonify({'success': False, 'errors': [f'Error deleting fuel record: {e}']}), 500

    if not deleted:
        return jsonify({'success': False, 'errors': ['Fuel record not found']}), 404
    return jsonify({'success': True})


@fuel_bp.route('/validate', methods=['POST'])
def validate_record():
    """Dry-run validation for the entry form"""
    data = _form_data()
    exclude_id = data.get('id')
    records = FuelRecordService.list_records()
    if exclude_id:
        records = [r for r in records if str(r.id) != str(exclude_id)]
    return jsonify(ValidationService.validate_fuel_record(data, records))


@fuel_bp.route('/stations')
def stations():
    """Station names already used in the log"""
    return jsonify({'stations': FuelRecordService.known_stations()})


# ===== STATISTICS =====

@fuel_bp.route('/statistics')
def statistics():
    records = FuelRecordService.list_records()
    snapshot = StatisticsService.calculate_statistics(records)
    return jsonify({
        'statistics': StatisticsService.serialize(snapshot),
        'efficiency_series': EfficiencyService.efficiency_series(records),
    })


@fuel_bp.route('/dashboard')
def dashboard():
    """Statistics plus goal/budget insights"""
    goal = request.args.get('goal', type=float) or current_app.config['FUEL_EFFICIENCY_GOAL']
    budget = request.args.get('budget', type=float) or current_app.config['MONTHLY_FUEL_BUDGET']

    records = FuelRecordService.list_records()
    snapshot = StatisticsService.calculate_statistics(records)
    return jsonify({
        'statistics': StatisticsService.serialize(snapshot),
        'insights': InsightService.build_dashboard(snapshot, records, goal, budget),
    })


# ===== IMPORT / EXPORT =====

@fuel_bp.route('/export/<kind>')
def export(kind):
    """Download the log as CSV, JSON or a monthly report"""
    if kind not in EXPORT_MIMETYPES:
        return jsonify({'success': False, 'errors': [f'Unknown export format: {kind}']}), 404

    records = FuelRecordService.list_records()
    if not records:
        return jsonify({'success': False, 'errors': ['There is no data to export']}), 400

    if kind == 'csv':
        body = ExportService.to_csv(records)
    elif kind == 'json':
        body = ExportService.to_json(records)
    else:
        body = ExportService.monthly_report(records)

    filename = ExportService.export_filename(kind)
    current_app.logger.info(f'Exported {len(records)} fuel records as {kind}')
    return Response(
        body,
        mimetype=EXPORT_MIMETYPES[kind],
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


@fuel_bp.route('/import', methods=['POST'])
def import_records():
    """Upload a CSV or JSON file; all rows are stored or none are"""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'success': False, 'errors': ['No file uploaded']}), 400

    try:
        text = upload.read().decode('utf-8-sig')
    except UnicodeDecodeError:
        return jsonify({'success': False, 'errors': ['The file must be UTF-8 encoded']}), 400

    result = ImportService.parse_file(upload.filename, text)
    if not result['success']:
        current_app.logger.info(f'Import of {upload.filename} rejected: {len(result["errors"])} error(s)')
        return jsonify(result), 400

    try:
        records = FuelRecordService.import_records(result['data'])
    except Exception as e:
        return jsonify({'success': False, 'errors': [f'Error importing records: {e}']}), 500

    return jsonify({'success': True, 'imported': len(records), 'message': result['message']}), 201


@fuel_bp.route('/import/sample')
def import_sample():
    return Response(
        ImportService.sample_csv(),
        mimetype=EXPORT_MIMETYPES['csv'],
        headers={'Content-Disposition': 'attachment; filename=fuel_records_sample.csv'}
    )
