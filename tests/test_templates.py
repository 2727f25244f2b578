import pytest

from anonychat.domain.common import replies
from anonychat.domain.common.templates import T, Template


def test_render_with_named_fields():
    t = T("Hai *{nickname}*, XP kamu {xp}", "nickname", "xp")
    assert t.render(nickname="Budi", xp=12) == "Hai *Budi*, XP kamu 12"


def test_render_rejects_missing_and_unknown_fields():
    t = T("Hai {nickname}", "nickname")
    with pytest.raises(KeyError):
        t.render()
    with pytest.raises(KeyError):
        t.render(nickname="a", xp=1)


def test_declared_fields_must_match_placeholders():
    with pytest.raises(ValueError):
        T("Hai {nickname}")
    with pytest.raises(ValueError):
        T("Hai", "nickname")
    with pytest.raises(ValueError):
        T("Hai {}")


def test_all_replies_are_templates():
    found = [v for v in vars(replies).values() if isinstance(v, Template)]
    assert len(found) > 20
    assert replies.MENU.fields == frozenset({"nickname"})
    assert "Budi" in replies.MENU.render(nickname="Budi")
