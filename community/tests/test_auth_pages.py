import pytest

from community.core.auth.models import AuthSession

pytestmark = pytest.mark.integration


def test_root_redirects_to_login_when_signed_out(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")


def test_unknown_path_ends_on_login_when_signed_out(client):
    resp = client.get("/some/unknown")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")

    final = client.get("/some/unknown", follow_redirects=True)
    assert final.request.path == "/login"
    assert b"Log in" in final.data


def test_login_and_signup_forms_render(client):
    login = client.get("/login")
    signup = client.get("/signup")
    assert login.status_code == 200
    assert b'name="csrf_token"' in login.data
    assert signup.status_code == 200
    assert b"At least 6 characters" in signup.data


def test_signup_lands_on_the_feed(client, sign_up):
    resp = sign_up(client, email="alice@example.com")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")

    page = client.get("/")
    assert page.status_code == 200
    assert b"alice@example.com" in page.data


def test_signed_in_users_are_sent_home_from_auth_pages(auth_client):
    for path in ("/login", "/signup", "/elsewhere"):
        resp = auth_client.get(path)
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/")


def test_wrong_password_rerenders_form(client, sign_up, app):
    sign_up(client, email="alice@example.com")
    other = app.test_client()

    resp = other.post("/login", data={"email": "alice@example.com", "password": "nope-nope"})

    assert resp.status_code == 400
    assert b"The email or password is incorrect." in resp.data
    assert b'value="alice@example.com"' in resp.data


def test_login_from_second_browser(client, sign_up, app):
    sign_up(client, email="alice@example.com")
    other = app.test_client()

    resp = other.post("/login", data={"email": "alice@example.com", "password": "secret123"})

    assert resp.status_code == 302
    assert other.get("/").status_code == 200
    assert AuthSession.query.count() == 2


def test_duplicate_signup_shows_error(client, sign_up, app):
    sign_up(client, email="alice@example.com")
    resp = sign_up(app.test_client(), email="alice@example.com")

    assert resp.status_code == 400
    assert b"already exists" in resp.data


def test_logout_returns_to_login(auth_client, runtime_for):
    resp = auth_client.post("/logout")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")

    assert runtime_for(auth_client).auth.current_session is None
    assert auth_client.get("/").headers["Location"].endswith("/login")


def test_placeholder_while_session_is_loading(auth_client, runtime_for):
    runtime_for(auth_client).auth.loading = True

    resp = auth_client.get("/")

    assert resp.status_code == 200
    assert b"Loading" in resp.data


def test_csrf_is_enforced_on_forms(client, app):
    app.config["WTF_CSRF_ENABLED"] = True

    resp = client.post("/login", data={"email": "alice@example.com", "password": "secret123"})

    assert resp.status_code == 403
