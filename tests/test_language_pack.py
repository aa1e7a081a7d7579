from __future__ import annotations

import pytest

from pydhr.lang_dhr.dhr_catalog import default_catalog
from pydhr.lang_dhr.dhr_language_pack import DhrLanguagePack, _offset_for
from pydhr.services.language_id import is_dhrlang_path, language_id_for_path
from pydhr.ui.controllers.language_service_hub import LanguageServiceHub

SOURCE = "मुख्य() {\n    अगर (x) {\n    } नहीं तो {\n    }\n}\n"


@pytest.fixture
def pack(qapp):
    return DhrLanguagePack()


@pytest.fixture
def hub(qapp, pack):
    hub = LanguageServiceHub()
    hub.register_provider(pack, language_ids=("dhrlang",))
    return hub


def test_language_ids():
    assert language_id_for_path("/w/main.dhr") == "dhrlang"
    assert language_id_for_path("/w/MAIN.DHR") == "dhrlang"
    assert language_id_for_path("/w/readme.txt") == "plaintext"
    assert language_id_for_path("") == "plaintext"
    assert is_dhrlang_path("a.dhr")
    assert not is_dhrlang_path("a.dhr.bak")


def test_pack_capabilities(pack):
    assert pack.capabilities.completion is True
    assert pack.capabilities.hover is True
    assert pack.capabilities.definition is False
    assert pack.trigger_characters == (".", "(")
    assert pack.supports_file("x.dhr")
    assert not pack.supports_file("x.py")


def test_offset_for_clamps_to_line():
    assert _offset_for("ab\ncd", 2, 1) == 4
    assert _offset_for("ab\ncd", 1, 99) == 2
    assert _offset_for("ab\ncd", 9, 0) == 5
    assert _offset_for("", 1, 0) == 0


def test_completion_emits_every_item(pack):
    received = []
    pack.completionReady.connect(received.append)
    pack.request_completion(
        file_path="/w/main.dhr",
        source_text=SOURCE,
        line=2,
        column=4,
        prefix="अ",
        token=7,
        trigger_char=".",
    )
    payload = received[0]
    assert payload["result_type"] == "completion"
    assert payload["token"] == 7
    assert payload["backend"] == "dhrlang"
    assert payload["prefix"] == "अ"
    assert [item["label"] for item in payload["items"]] == list(default_catalog().labels())


def test_hover_resolves_word_under_cursor(pack):
    received = []
    pack.hoverReady.connect(received.append)
    line_three = SOURCE.splitlines()[2]
    pack.request_hover(
        file_path="/w/main.dhr",
        source_text=SOURCE,
        line=3,
        column=line_three.index("तो"),
        token=3,
    )
    payload = received[0]
    assert payload["word"] == "नहीं तो"
    assert payload["label"] == "नहीं तो"
    assert payload["markdown"].startswith("**नहीं तो**")


def test_hover_with_explicit_word_miss(pack):
    received = []
    pack.hoverReady.connect(received.append)
    pack.request_hover(file_path="/w/main.dhr", source_text="", line=1, column=0, token=1, word="x")
    assert received[0]["markdown"] == ""
    assert received[0]["label"] == ""


def test_hub_routes_by_file_path(hub):
    completions = []
    hovers = []
    hub.completionReady.connect(completions.append)
    hub.hoverReady.connect(hovers.append)

    hub.request_completion(
        file_path="/w/main.dhr", source_text="", line=1, column=0, prefix="", token=1, reason="manual"
    )
    hub.request_hover(file_path="/w/main.dhr", source_text="", line=1, column=0, token=2, word="क्लास")

    assert completions[0]["backend"] == "dhrlang"
    assert len(completions[0]["items"]) == len(default_catalog())
    assert hovers[0]["label"] == "क्लास"


def test_hub_answers_unknown_languages_with_empty_results(hub):
    completions = []
    hovers = []
    hub.completionReady.connect(completions.append)
    hub.hoverReady.connect(hovers.append)

    hub.request_completion(file_path="/w/notes.txt", token=4, reason="auto")
    hub.request_hover(file_path="/w/notes.txt", token=5, word="अगर")

    assert completions == [
        {"result_type": "completion", "file_path": "/w/notes.txt", "token": 4, "items": [], "backend": "none", "reason": "auto"}
    ]
    assert hovers[0]["markdown"] == ""
    assert hovers[0]["source"] == "none"


def test_hub_provider_lookup(hub, pack):
    assert hub.provider_for_path("/w/a.dhr") is pack
    assert hub.has_provider_for("DhrLang")
    assert not hub.has_provider_for("python")


def test_completion_can_be_disabled(pack):
    received = []
    pack.completionReady.connect(received.append)
    pack.update_settings({"enabled": False})
    pack.request_completion(file_path="/w/a.dhr", source_text="", line=1, column=0, prefix="", token=1)
    assert received[0]["items"] == []

    pack.update_settings({"enabled": True})
    pack.request_completion(file_path="/w/a.dhr", source_text="", line=1, column=0, prefix="", token=2)
    assert len(received[1]["items"]) == len(default_catalog())


def test_auto_trigger_off_only_suppresses_automatic_requests(pack):
    received = []
    pack.completionReady.connect(received.append)
    pack.update_settings({"enabled": True, "auto_trigger": False})
    pack.request_completion(file_path="/w/a.dhr", source_text="", line=1, column=0, prefix="", token=1, reason="auto")
    pack.request_completion(file_path="/w/a.dhr", source_text="", line=1, column=0, prefix="", token=2, reason="manual")
    assert received[0]["items"] == []
    assert len(received[1]["items"]) == len(default_catalog())


def test_hub_follows_completion_settings(hub, settings):
    received = []
    hub.completionReady.connect(received.append)
    hub.bind_settings(settings)

    def ask(token: int) -> list:
        hub.request_completion(
            file_path="/w/a.dhr", source_text="", line=1, column=0, prefix="", token=token, reason="manual"
        )
        return received[-1]["items"]

    assert len(ask(1)) == len(default_catalog())
    settings.set("completion.enabled", False)
    assert ask(2) == []
    settings.set("completion.enabled", True)
    assert len(ask(3)) == len(default_catalog())

    hub.shutdown()
    settings.set("completion.enabled", False)
    assert len(ask(4)) == len(default_catalog())


def test_provider_registered_after_binding_gets_current_settings(qapp, settings):
    settings.set("completion.enabled", False)
    hub = LanguageServiceHub()
    hub.bind_settings(settings)
    late = DhrLanguagePack()
    hub.register_provider(late, language_ids="dhrlang")

    received = []
    hub.completionReady.connect(received.append)
    hub.request_completion(file_path="/w/a.dhr", source_text="", line=1, column=0, prefix="", token=1)
    assert received[0]["items"] == []
