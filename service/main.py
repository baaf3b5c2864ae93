import os
import tempfile
from flask import Flask, jsonify

from service.routes.converter import converter_bp


def create_app(config=None):
    """Create the conversion service app"""
    app = Flask(__name__)

    app.config['MAX_CONTENT_LENGTH'] = 50 * 1024 * 1024  # 50MB max upload
    app.config['UPLOAD_FOLDER'] = os.getenv('P2I_UPLOAD_FOLDER',
                                            os.path.join(tempfile.gettempdir(), 'p2i_uploads'))
    app.config['OUTPUT_FOLDER'] = os.getenv('P2I_OUTPUT_FOLDER',
                                            os.path.join(tempfile.gettempdir(), 'p2i_outputs'))
    if config:
        app.config.update(config)

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
    os.makedirs(app.config['OUTPUT_FOLDER'], exist_ok=True)

    app.register_blueprint(converter_bp, url_prefix='/api/converter')

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    return app


app = create_app()


if __name__ == '__main__':
    print("🚀 Starting Postman to Insomnia Converter Service...")
    print("📊 Thread pool executor ready for concurrent processing")
    port = int(os.environ.get('PORT', 8000))
    app.run(host='0.0.0.0', port=port, debug=False, threaded=True)
