import logging

from flask import jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from sitebuilder.domain.exceptions import BuilderError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(BuilderError)
    def handle_builder_error(error):
        if error.status_code >= 500:
            logger.error("Unhandled builder error: %s", error.message)
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(ValidationError)
    def handle_request_validation(error):
        response = jsonify({
            "error": "bad_request",
            "message": "Request body is invalid",
            "details": [
                {"loc": [str(p) for p in e["loc"]], "msg": e["msg"]}
                for e in error.errors()
            ],
        })
        response.status_code = 400
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        response = jsonify({
            "error": error.name.lower().replace(" ", "_"),
            "message": error.description,
        })
        response.status_code = error.code
        return response
