import os
import glob
import shutil
import uuid
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from flask import Blueprint, request, jsonify, send_file, current_app
from werkzeug.utils import secure_filename

from p2i.config.models import P2IConfig
from p2i.converters.batch import BatchConverter
from p2i.utils.constants import OUTPUT_FORMATS
from p2i.version import get_version_info

converter_bp = Blueprint('converter', __name__)

# Job id -> status dict; written by worker threads
conversion_status = {}
status_lock = threading.Lock()

# Job id -> Future, so callers can wait on a job
futures = {}

# Thread pool for conversion jobs
executor = ThreadPoolExecutor(max_workers=4)

TRUE_VALUES = ('1', 'true', 'yes', 'on')
OUTPUT_MIMETYPES = {
    'yaml': 'application/x-yaml',
    'json': 'application/json',
}


def allowed_file(filename):
    """Check if file has allowed extension"""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() == 'json'


def set_status(job_id, **fields):
    with status_lock:
        conversion_status.setdefault(job_id, {}).update(fields)


def get_job(job_id):
    with status_lock:
        status = conversion_status.get(job_id)
        return dict(status) if status is not None else None


def conversion_options(form):
    """Read transform and output options from the upload form."""
    fmt = form.get('format', 'yaml').lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")
    return {
        'format': fmt,
        'preprocess': form.get('preprocess', '').lower() in TRUE_VALUES,
        'postprocess': form.get('postprocess', '').lower() in TRUE_VALUES,
        'experimental': form.get('experimental', '').lower() in TRUE_VALUES,
        'use_collection_folder': form.get('use_collection_folder', '').lower() in TRUE_VALUES,
        'include_response_examples': form.get('include_response_examples', '').lower() in TRUE_VALUES,
    }


def run_conversion(job_id, input_path, output_dir, options):
    """Convert one uploaded file; runs on the thread pool"""
    set_status(job_id, status='processing', message='Converting Postman file...', progress=30)

    config = P2IConfig()
    config.output.directory = Path(output_dir)
    config.output.format = options['format']
    config.transforms.preprocess = options['preprocess']
    config.transforms.postprocess = options['postprocess']
    config.transforms.experimental = options['experimental']
    config.importer.use_collection_folder = options['use_collection_folder']
    config.importer.include_response_examples = options['include_response_examples']

    try:
        result = BatchConverter(config).convert_files([input_path])
    except Exception as e:
        set_status(job_id, status='error', message=f'Conversion error: {e}', progress=0)
        return

    if result.successful and result.outputs:
        output_file = result.outputs[0]
        file_size = os.path.getsize(output_file)
        set_status(
            job_id,
            status='completed',
            message=f'Conversion completed successfully! Output size: {file_size / 1024:.1f} KB',
            progress=100,
            output_file=output_file,
            file_size=file_size
        )
    else:
        error = result.errors[0][1] if result.errors else 'no output produced'
        set_status(job_id, status='error', message=f'Conversion failed: {error}', progress=0)


def queue_job(file, options):
    """Save an upload and submit its conversion; returns (job_id, filename)"""
    job_id = str(uuid.uuid4())
    filename = secure_filename(file.filename)

    upload_folder = current_app.config['UPLOAD_FOLDER']
    input_path = os.path.join(upload_folder, f"{job_id}_{filename}")
    file.save(input_path)
    output_dir = os.path.join(current_app.config['OUTPUT_FOLDER'], job_id)

    set_status(
        job_id,
        status='queued',
        message='File uploaded successfully, queued for conversion',
        progress=0,
        filename=filename,
        format=options['format']
    )
    futures[job_id] = executor.submit(run_conversion, job_id, input_path, output_dir, options)
    return job_id, filename


@converter_bp.route('/upload', methods=['POST'])
def upload_file():
    """Handle file upload and start conversion"""
    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files['file']
    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    if not allowed_file(file.filename):
        return jsonify({'error': 'Only Postman JSON files are allowed'}), 400

    try:
        options = conversion_options(request.form)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    job_id, filename = queue_job(file, options)
    return jsonify({
        'job_id': job_id,
        'message': 'File uploaded successfully, conversion started',
        'filename': filename
    })


@converter_bp.route('/batch/upload', methods=['POST'])
def batch_upload():
    """Handle multiple file uploads; one job per file"""
    files = request.files.getlist('files')
    if not files or all(f.filename == '' for f in files):
        return jsonify({'error': 'No files provided'}), 400

    try:
        options = conversion_options(request.form)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    job_ids = []
    results = []
    for file in files:
        if not allowed_file(file.filename):
            results.append({
                'filename': file.filename,
                'status': 'error',
                'message': 'Only Postman JSON files are allowed'
            })
            continue

        job_id, filename = queue_job(file, options)
        job_ids.append(job_id)
        results.append({
            'filename': filename,
            'job_id': job_id,
            'status': 'queued',
            'message': 'File uploaded successfully, conversion started'
        })

    return jsonify({
        'message': f'Batch upload completed: {len(job_ids)} files queued for conversion',
        'job_ids': job_ids,
        'results': results
    })


@converter_bp.route('/status/<job_id>', methods=['GET'])
def get_status(job_id):
    """Get conversion status"""
    status = get_job(job_id)
    if status is None:
        return jsonify({'error': 'Job not found'}), 404
    status.pop('output_file', None)
    return jsonify(status)


@converter_bp.route('/download/<job_id>', methods=['GET'])
def download_file(job_id):
    """Download converted file"""
    status = get_job(job_id)
    if status is None:
        return jsonify({'error': 'Job not found'}), 404

    if status['status'] != 'completed':
        return jsonify({'error': 'Conversion not completed'}), 400

    output_file = status.get('output_file')
    if not output_file or not os.path.exists(output_file):
        return jsonify({'error': 'Output file not found'}), 404

    return send_file(
        output_file,
        as_attachment=True,
        download_name=os.path.basename(output_file),
        mimetype=OUTPUT_MIMETYPES.get(status.get('format'), 'application/octet-stream')
    )


@converter_bp.route('/cleanup/<job_id>', methods=['DELETE'])
def cleanup_job(job_id):
    """Clean up job files and status"""
    with status_lock:
        status = conversion_status.pop(job_id, None)
    futures.pop(job_id, None)

    if status is not None:
        for path in glob.glob(os.path.join(current_app.config['UPLOAD_FOLDER'], f"{job_id}_*")):
            os.remove(path)
        shutil.rmtree(os.path.join(current_app.config['OUTPUT_FOLDER'], job_id), ignore_errors=True)

    return jsonify({'message': 'Job cleaned up successfully'})


@converter_bp.route('/queue/status', methods=['GET'])
def get_queue_status():
    """Get overall queue status and statistics"""
    with status_lock:
        states = [status.get('status') for status in conversion_status.values()]

    return jsonify({
        'total_jobs': len(states),
        'queued': states.count('queued'),
        'processing': states.count('processing'),
        'completed': states.count('completed'),
        'errors': states.count('error'),
        'max_workers': executor._max_workers
    })


@converter_bp.route('/version', methods=['GET'])
def version():
    """Converter version information"""
    return jsonify(get_version_info())
