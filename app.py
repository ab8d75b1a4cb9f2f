"""
Flask Application for Email Verification API

Provides the REST endpoint that checks an email's format and the MX, SPF
and DMARC records of its domain.
"""

import logging
import os
import socket
import sys

from flask import Flask, Response, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest
from werkzeug.serving import make_server

from email_verifier import EmailVerifier, DomainValidator, DNSService

# Configuration
PORT = int(os.environ.get('PORT', 8080))
DEBUG = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
# Unset keeps the resolver's own timeout
DNS_TIMEOUT = float(os.environ['DNS_TIMEOUT']) if os.environ.get('DNS_TIMEOUT') else None

logger = logging.getLogger(__name__)


def _configure_logging(level_name: str) -> None:
    """
    Send log records to stdout.

    Format: timestamp  level  logger-name  message
    """
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    # Importing the module twice must not duplicate output
    if not root_logger.handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


_configure_logging(LOG_LEVEL)

# Create Flask application
app = Flask(__name__)
app.json.sort_keys = False
CORS(app)

# Initialize verifier
dns_service = DNSService(timeout=DNS_TIMEOUT)
verifier = EmailVerifier(DomainValidator(dns_service))


def _text_response(message: str, status: int, headers=None) -> Response:
    """Build a plain-text error response."""
    return Response(message, status=status, mimetype='text/plain', headers=headers)


@app.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON response with status
    """
    return jsonify({
        'status': 'healthy',
        'service': 'email-verifier',
        'dns_timeout': DNS_TIMEOUT
    }), 200


# No automatic OPTIONS: every method but POST is answered with 405
@app.route('/verify', methods=['POST'], provide_automatic_options=False)
def verify_email():
    """
    Verify an email address.

    Request Body:
        {
            "email": "user@example.com"
        }

    Returns:
        JSON response with the verification result, always 200 once the
        request itself is well formed:
        {
            "valid": true,
            "hasMX": true,
            "hasSPF": true,
            "spfRecord": "v=spf1 include:_spf.example.com ~all",
            "hasDMARC": false
        }
    """
    # Body is decoded as JSON whatever the Content-Type says
    try:
        data = request.get_json(force=True)
    except BadRequest:
        return _text_response('Invalid request body', 400)

    # A JSON null body carries no fields at all
    if data is None:
        data = {}

    if not isinstance(data, dict):
        return _text_response('Invalid request body', 400)

    email = ''
    for key, value in data.items():
        # Field name matches case-insensitively, a later key overrides an earlier one
        if key.lower() != 'email' or value is None:
            continue
        if not isinstance(value, str):
            return _text_response('Invalid request body', 400)
        email = value

    if not email:
        return _text_response('Email is required', 400)

    result = verifier.verify(email)

    return jsonify(result.to_dict()), 200


@app.errorhandler(404)
def not_found(error):
    """Handle 404 errors."""
    return _text_response('Not found', 404)


@app.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors."""
    allowed = [m for m in (error.valid_methods or []) if m not in ('HEAD', 'OPTIONS')]
    message = f"Only {', '.join(allowed)} method is allowed" if allowed else 'Method not allowed'
    headers = {'Allow': ', '.join(error.valid_methods or [])}
    return _text_response(message, 405, headers)


@app.errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    return _text_response('Internal server error', 500)


def serve(host: str = '0.0.0.0', port: int = PORT) -> int:
    """
    Run the threaded WSGI server until interrupted.

    The listening socket is bound here rather than inside werkzeug, which
    reports a bind failure on stderr and exits on its own.

    Returns:
        Process exit status, 1 when the port cannot be bound
    """
    logger.info("starting server at :%d", port)

    try:
        sock = socket.create_server((host, port))
    except OSError as e:
        logger.error("Error in starting the server: %s", e)
        return 1

    app.debug = DEBUG
    # werkzeug duplicates the descriptor, so our copy can be closed
    with sock:
        server = make_server(host, port, app, threaded=True, fd=sock.fileno())

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(serve())
