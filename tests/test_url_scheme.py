import base64
import uuid
from decimal import Decimal
from urllib.parse import parse_qs, unquote, urlsplit

from mixinkit.url_scheme import SEND_SCHEME_CATEGORY_TEXT, URL


def _id():
    return str(uuid.uuid4())


def test_transfer():
    user_id = _id()
    assert URL.transfer(user_id) == "mixin://transfer/" + user_id


def test_users_and_codes():
    user_id = _id()
    assert URL.users(user_id) == "mixin://users/" + user_id
    assert URL.codes("abc") == "mixin://codes/abc"


def test_apps_default_action():
    app_id = _id()
    assert URL.apps(app_id, "", None) == "mixin://apps/" + app_id + "?action=open"


def test_apps_specify_action():
    app_id = _id()
    assert URL.apps(app_id, "close", None) == "mixin://apps/" + app_id + "?action=close"


def test_apps_specify_params():
    app_id = _id()
    url = URL.apps(app_id, "", {"k1": "v1", "k2": "v2"})
    assert "mixin://apps/" + app_id + "?action=open" in url
    assert "k1=v1" in url
    assert "k2=v2" in url


def test_snapshots():
    assert URL.snapshots("", "") == "mixin://snapshots"
    assert URL.snapshots("s1", "") == "mixin://snapshots/s1"
    assert URL.snapshots("", "t1") == "mixin://snapshots?trace=t1"


def test_conversations():
    assert URL.conversations("c1", "u1") == "mixin://conversations/c1?user=u1"
    assert URL.conversations("c1") == "mixin://conversations/c1"


def test_pay_query_fields():
    asset, trace, recipient = _id(), _id(), _id()
    url = URL.pay(asset, trace, Decimal("100"), recipient, "test memo")
    parts = urlsplit(url)
    assert parts.scheme == "mixin" and parts.netloc == "pay"
    query = parse_qs(parts.query)
    assert query["asset"] == [asset]
    assert query["trace"] == [trace]
    assert query["amount"] == ["100"]
    assert query["recipient"] == [recipient]
    assert query["memo"] == ["test memo"]


def test_pay_small_amount_has_no_exponent():
    url = URL.pay("a", "t", Decimal("1E-8"), "r", "")
    assert parse_qs(urlsplit(url).query)["amount"] == ["0.00000001"]


def test_send_round_trip():
    data = b"\xfb\xff hello"
    url = URL.send(SEND_SCHEME_CATEGORY_TEXT, data, "conv")
    query = parse_qs(urlsplit(url).query)
    assert query["category"] == ["text"]
    assert query["conversation"] == ["conv"]
    assert base64.b64decode(unquote(query["data"][0])) == data


def test_send_without_data():
    assert URL.send("text", b"", "") == "mixin://send?category=text"