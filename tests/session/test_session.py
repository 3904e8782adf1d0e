from __future__ import annotations

import httpx

import hrq
from hrq import Defaults, Session


def cookie_pairs(header: str) -> set[str]:
    return {pair.strip() for pair in header.split(";") if pair.strip()}


def cookie_handler(seen: list[str]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("cookie", ""))
        if request.url.path == "/first":
            return httpx.Response(
                200,
                headers=[("Set-Cookie", "a1=b1; Path=/"), ("Set-Cookie", "c1=d1; Path=/")],
            )
        if request.url.path == "/second":
            return httpx.Response(
                200,
                headers=[("Set-Cookie", "a2=b2; Path=/"), ("Set-Cookie", "c2=d2; Path=/")],
            )
        if request.url.path == "/admin/login":
            return httpx.Response(200, headers={"Set-Cookie": "role=root; Path=/admin"})
        return httpx.Response(200)

    return handler


class TestSessionCookies:
    def test_cookies_are_replayed(self) -> None:
        seen: list[str] = []
        with Session(transport=httpx.MockTransport(cookie_handler(seen))) as session:
            first = session.send(hrq.get("http://example.com/first"))
            assert first.cookie_value("a1") == "b1"
            assert first.cookie_value("c1") == "d1"

            second = session.send(hrq.get("http://example.com/second"))
            assert second.cookie_value("a2") == "b2"
            assert second.cookie_value("c2") == "d2"

            assert seen[0] == ""
            assert cookie_pairs(seen[1]) == {"a1=b1", "c1=d1"}

            cookies = session.cookies("http://example.com/")
            assert cookies == {"a1": "b1", "c1": "d1", "a2": "b2", "c2": "d2"}
            assert session.cookie_value("http://example.com/", "A1") == "b1"
            assert session.cookie_value("http://example.com/", "missing") == ""

    def test_cookies_are_scoped_to_domain(self) -> None:
        seen: list[str] = []
        with Session(transport=httpx.MockTransport(cookie_handler(seen))) as session:
            session.send(hrq.get("http://example.com/first"))
            session.send(hrq.get("http://other.org/page"))
            assert seen[1] == ""
            assert session.cookies("http://other.org/") == {}

    def test_cookies_are_scoped_to_path(self) -> None:
        seen: list[str] = []
        with Session(transport=httpx.MockTransport(cookie_handler(seen))) as session:
            session.send(hrq.get("http://example.com/admin/login"))
            assert session.cookies("http://example.com/") == {}
            assert session.cookies("http://example.com/admin/users") == {"role": "root"}

    def test_explicit_cookies_join_jar_cookies(self) -> None:
        seen: list[str] = []
        with Session(transport=httpx.MockTransport(cookie_handler(seen))) as session:
            session.send(hrq.get("http://example.com/first"))
            session.send(hrq.get("http://example.com/other").put_cookie("x", "y"))
            assert cookie_pairs(seen[1]) == {"a1=b1", "c1=d1", "x=y"}

    def test_redirect_cookies_land_in_jar(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/login":
                return httpx.Response(302, headers={"Location": "/home", "Set-Cookie": "sid=42; Path=/"})
            return httpx.Response(200, text="home")

        with Session(transport=httpx.MockTransport(handler)) as session:
            response = session.send(hrq.get("http://example.com/login"))
            assert response.text() == "home"
            assert len(response.history) == 1
            assert session.cookie_value("http://example.com/", "sid") == "42"


class TestSessionSend:
    def test_uses_request_timeout(self) -> None:
        timeouts: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            timeouts.append(request.extensions["timeout"]["read"])
            return httpx.Response(200)

        with Session(transport=httpx.MockTransport(handler)) as session:
            session.send(hrq.get("http://example.com").set_timeout(3))
            session.send(hrq.get("http://example.com").set_timeout(7))
        assert timeouts == [3, 7]

    def test_timeout_from_defaults(self) -> None:
        session = Session(defaults=Defaults(timeout=4.0), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        assert session.timeout == 4.0
        session.close()

    def test_reading_body_keeps_session_open(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))
        with Session(transport=transport) as session:
            assert session.send(hrq.get("http://example.com")).text() == "ok"
            assert session.send(hrq.get("http://example.com")).text() == "ok"


class TestSessionCookieLookup:
    def test_reads_back_cookie_for_host_with_port(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, headers={"Set-Cookie": "sid=1; Path=/"}))
        with Session(transport=transport) as session:
            session.send(hrq.get("http://localhost:8000/")).close()
            assert session.cookie_value("http://localhost:8000/", "sid") == "1"
            assert session.cookies("http://localhost:8000/") == {"sid": "1"}

    def test_empty_jar(self) -> None:
        with Session(transport=httpx.MockTransport(lambda request: httpx.Response(200))) as session:
            assert session.cookies("http://example.com/") == {}
            assert session.cookie_value("http://example.com/", "sid") == ""
