from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, json_response
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service

    @app.get("/auth/google", endpoint="auth_google")
    def auth_google():
        return json_response({"login_url": auth.login_url("google")})

    @app.get("/auth/callback", endpoint="auth_callback")
    def auth_callback():
        expires_in = request.args.get("expires_in")
        result = auth.handle_callback(
            access_token=request.args.get("access_token", ""),
            refresh_token=request.args.get("refresh_token", ""),
            expires_in=int(expires_in) if expires_in and expires_in.isdigit() else None,
            token_type=request.args.get("token_type"),
        )
        return json_response(
            {
                "message": "Login successful",
                "user": result.user.to_dict(),
                "profile_pic": result.profile_pic,
                **result.session.to_dict(),
            }
        )

    @app.post("/auth/refresh-token", endpoint="auth_refresh_token")
    def auth_refresh_token():
        session = auth.refresh(json_body().get("refresh_token", ""))
        return json_response({"access_token": session.access_token, "refresh_token": session.refresh_token})
