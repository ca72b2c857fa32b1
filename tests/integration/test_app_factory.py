"""create_app() assembly checks; the lifespan is never entered here."""

from app import create_app


def _paths(app) -> set[str]:
    return {route.path for route in app.routes}


def test_registers_api_routes(app_settings):
    paths = _paths(create_app(app_settings))
    assert {
        "/api/health",
        "/api/auth/signup",
        "/api/auth/login",
        "/api/auth/oauth",
        "/api/auth/verify-email/{token}",
        "/api/auth/reset-password/{token}",
        "/api/auth/me",
        "/api/videos",
        "/api/videos/{video_id}/like",
        "/api/videos/{video_id}/comments/{comment_id}",
    } <= paths


def test_sentry_initialised_only_with_dsn(app_settings, mocker):
    init = mocker.patch("app.sentry_sdk.init")
    create_app(app_settings)
    init.assert_not_called()

    app_settings.sentry.sentry_dsn = "https://key@sentry.example/1"
    create_app(app_settings)
    init.assert_called_once()
    assert init.call_args.kwargs["environment"] == app_settings.env
