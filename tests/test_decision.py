"""Tests for the first-match decision policy."""

from app.core.bot_detection import detect_bot
from app.core.decision import decide
from app.core.device_detection import detect_device
from app.core.verdict import ALLOW, LayerVerdict
from conftest import CHROME_DESKTOP_UA, IPHONE_SAFARI_UA, make_campaign

GEO_BLOCK = LayerVerdict(should_block=True, reason="Country blocked: Brazil (BR)")
ORIGIN_BLOCK = LayerVerdict(should_block=True, reason="Direct access without ad trace")


def _all_layers_on(**overrides):
    fields = dict(block_bots=True, block_desktop=True, blocked_countries=["BR"], enable_origin_lock=True)
    fields.update(overrides)
    return make_campaign(**fields)


def test_every_layer_failing_reports_only_bot_layer():
    d = decide(_all_layers_on(), detect_bot("curl/8.0"), detect_device("curl/8.0"), GEO_BLOCK, ORIGIN_BLOCK)
    assert d.blocked is True
    assert d.layer == 1
    assert d.reason == "Layer 1 (Bot): cURL"


def test_bot_layer_disabled_falls_through_to_device():
    campaign = _all_layers_on(block_bots=False)
    d = decide(campaign, detect_bot("curl/8.0"), detect_device("curl/8.0"), GEO_BLOCK, ORIGIN_BLOCK)
    assert d.layer == 2
    assert d.reason == "Layer 2 (Device): Desktop Blocked: Unknown (Defaulting to Desktop)"


def test_geo_layer():
    d = decide(_all_layers_on(), detect_bot(IPHONE_SAFARI_UA), detect_device(IPHONE_SAFARI_UA),
               GEO_BLOCK, ORIGIN_BLOCK)
    assert d.layer == 3
    assert d.reason == "Layer 3 (Geo): Country blocked: Brazil (BR)"


def test_origin_layer():
    d = decide(_all_layers_on(), detect_bot(IPHONE_SAFARI_UA), detect_device(IPHONE_SAFARI_UA),
               ALLOW, ORIGIN_BLOCK)
    assert d.layer == 4
    assert d.reason == "Layer 4 (Origin Lock): Direct access without ad trace"


def test_nothing_triggers_allows():
    d = decide(_all_layers_on(), detect_bot(IPHONE_SAFARI_UA), detect_device(IPHONE_SAFARI_UA), ALLOW, ALLOW)
    assert d.blocked is False
    assert d.reason is None
    assert d.layer is None


def test_bot_detected_but_not_blocked_by_campaign():
    campaign = make_campaign(block_bots=False, block_desktop=False)
    d = decide(campaign, detect_bot("curl/8.0"), detect_device("curl/8.0"), ALLOW, ALLOW)
    assert d.blocked is False


def test_desktop_allowed_when_campaign_permits():
    campaign = make_campaign(block_desktop=False)
    d = decide(campaign, detect_bot(CHROME_DESKTOP_UA), detect_device(CHROME_DESKTOP_UA), ALLOW, ALLOW)
    assert d.blocked is False
