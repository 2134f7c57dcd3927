"""
Flask integration for the TD Ameritrade login flow.

create_app wires an Authenticator into a small web app:

- /authenticate redirects the browser to TD Ameritrade's login page
- /callback completes the login and redirects to a sample quote
- /quote returns quotes for ?ticker= using the stored token

Cookies written by the credential store are attached to the redirect
responses, so the browser carries the session through the flow.
"""

import logging

from flask import Flask, Response, jsonify, make_response, redirect, request

from ..api.exceptions import TDAmeritradeAPIError
from .authenticator import Authenticator
from .exceptions import TDAmeritradeOAuthError

logger = logging.getLogger(__name__)

AFTER_LOGIN_URL = "/quote?ticker=SPY"


def _error_response(message: str, status: int = 500) -> Response:
    return Response(message, status=status, content_type="text/plain; charset=utf-8")


def create_app(authenticator: Authenticator) -> Flask:
    """
    Create the Flask app serving the login flow.

    Args:
        authenticator: Authenticator whose store keeps state and tokens

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    @app.route("/authenticate", methods=["GET"])
    def authenticate() -> Response:
        response = make_response("", 307)
        try:
            url = authenticator.start_oauth2_flow(response, request)
        except TDAmeritradeOAuthError as e:
            logger.error(f"Could not start login: {e}")
            return _error_response(str(e))

        response.headers["Location"] = url
        return response

    @app.route("/callback", methods=["GET"])
    def callback() -> Response:
        response = redirect(AFTER_LOGIN_URL, code=307)
        try:
            authenticator.finish_oauth2_flow(response, request)
        except TDAmeritradeOAuthError as e:
            logger.error(f"Login failed: {e}")
            return _error_response(str(e))

        return response

    @app.route("/quote", methods=["GET"])
    def quote() -> Response:
        ticker = request.args.get("ticker")
        if not ticker:
            return _error_response("missing ticker", status=400)

        try:
            client = authenticator.authenticated_client(request)
            quotes = client.get_quotes(ticker)
        except (TDAmeritradeOAuthError, TDAmeritradeAPIError) as e:
            logger.error(f"Quote for {ticker} failed: {e}")
            return _error_response(str(e))

        return jsonify(quotes)

    return app
