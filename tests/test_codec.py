# tests/test_codec.py
"""Tests for the YAML codec boundary."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import yaml

from assetdir.codec import YamlCodec, decode, encode
from assetdir.errors import DecodeError, EncodeError


class Rarity(Enum):
    COMMON = "common"
    RARE = "rare"


@dataclass
class Stats:
    attack: int = 0
    defense: int = 0


@dataclass
class Weapon:
    identifier: str
    damage: int
    rarity: Rarity = Rarity.COMMON
    stats: Stats = field(default_factory=Stats)
    tags: List[str] = field(default_factory=list)
    icon: Optional[Path] = None
    locale: Optional[str] = None


@dataclass
class Bundle:
    identifier: str
    parts: List[Stats] = field(default_factory=list)
    extra: Dict[str, Stats] = field(default_factory=dict)


class Legacy:
    """Record using from_dict/to_dict instead of dataclass fields."""

    def __init__(self, identifier: str, value: int):
        self.identifier = identifier
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.identifier, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Legacy":
        return cls(identifier=data["id"], value=data["value"])


class TestDecode:
    """Test decoding YAML into records."""

    def test_decode_dataclass(self):
        weapon = decode(b"identifier: sword\ndamage: 5\n", Weapon)
        assert weapon == Weapon(identifier="sword", damage=5)

    def test_unknown_keys_ignored(self):
        weapon = decode(b"identifier: sword\ndamage: 5\ncolor: red\n", Weapon)
        assert weapon.identifier == "sword"
        assert not hasattr(weapon, "color")

    def test_nested_enum_and_path(self):
        data = b"""
identifier: bow
damage: 3
rarity: rare
stats:
  attack: 4
icon: icons/bow.png
"""
        weapon = decode(data, Weapon)
        assert weapon.rarity is Rarity.RARE
        assert weapon.stats == Stats(attack=4, defense=0)
        assert weapon.icon == Path("icons/bow.png")

    def test_list_and_dict_of_dataclasses(self):
        data = b"""
identifier: kit
parts:
  - attack: 1
  - defense: 2
extra:
  bonus:
    attack: 9
"""
        bundle = decode(data, Bundle)
        assert bundle.parts == [Stats(attack=1), Stats(defense=2)]
        assert bundle.extra == {"bonus": Stats(attack=9)}

    def test_lenient_missing_required_is_none(self):
        weapon = decode(b"identifier: sword\n", Weapon)
        assert weapon.damage is None

    def test_strict_missing_required_fails(self):
        with pytest.raises(DecodeError, match="missing required field 'damage'"):
            decode(b"identifier: sword\n", Weapon, strict=True)

    def test_strict_null_field_fails(self):
        with pytest.raises(DecodeError, match="'damage' is null"):
            decode(b"identifier: sword\ndamage: null\n", Weapon, strict=True)

    def test_strict_allows_optional_null(self):
        weapon = decode(b"identifier: sword\ndamage: 1\nlocale: null\n", Weapon, strict=True)
        assert weapon.locale is None

    def test_empty_document_is_empty_mapping(self):
        weapon = decode(b"", Weapon)
        assert weapon.identifier is None

    def test_invalid_yaml(self):
        with pytest.raises(DecodeError, match="Invalid YAML"):
            decode(b"identifier: [unclosed\n", Weapon)

    def test_non_mapping_document(self):
        with pytest.raises(DecodeError, match="Expected a mapping"):
            decode(b"- a\n- b\n", Weapon)

    def test_bad_enum_value(self):
        with pytest.raises(DecodeError):
            decode(b"identifier: x\ndamage: 1\nrarity: mythic\n", Weapon)

    def test_numeric_text_field(self):
        """Unquoted numbers in text fields are read as text."""
        weapon = decode(b"identifier: 1001\ndamage: 2\n", Weapon)
        assert weapon.identifier == "1001"

    def test_numeric_string_into_int(self):
        assert decode(b"identifier: x\ndamage: '12'\n", Weapon).damage == 12

    def test_bad_int_rejected(self):
        with pytest.raises(DecodeError, match="Weapon.damage: expected int"):
            decode(b"identifier: x\ndamage: abc\n", Weapon, strict=True)

    def test_bad_int_rejected_in_lenient_mode(self):
        with pytest.raises(DecodeError):
            decode(b"identifier: x\ndamage: abc\n", Weapon)

    def test_bool_is_not_int(self):
        with pytest.raises(DecodeError):
            decode(b"identifier: x\ndamage: true\n", Weapon)

    def test_mapping_into_text_rejected(self):
        with pytest.raises(DecodeError, match="expected str"):
            decode(b"identifier:\n  nested: 1\ndamage: 1\n", Weapon)

    def test_nested_scalar_checked(self):
        with pytest.raises(DecodeError, match="Stats.attack"):
            decode(b"identifier: x\ndamage: 1\nstats:\n  attack: lots\n", Weapon)

    def test_from_dict_record(self):
        legacy = decode(b"id: old\nvalue: 3\n", Legacy)
        assert legacy.identifier == "old"
        assert legacy.value == 3

    def test_from_dict_failure_wrapped(self):
        with pytest.raises(DecodeError, match="from_dict failed"):
            decode(b"value: 3\n", Legacy)

    def test_unsupported_target(self):
        with pytest.raises(DecodeError, match="not a dataclass"):
            decode(b"a: 1\n", object)


class TestEncode:
    """Test encoding records to YAML."""

    def test_encode_dataclass(self):
        weapon = Weapon(identifier="bow", damage=3, rarity=Rarity.RARE, icon=Path("i.png"))
        data = yaml.safe_load(encode(weapon))
        assert data["identifier"] == "bow"
        assert data["rarity"] == "rare"
        assert data["stats"] == {"attack": 0, "defense": 0}
        assert data["icon"] == "i.png"

    def test_encode_keeps_field_order(self):
        text = encode(Stats(attack=1, defense=2)).decode("utf-8")
        assert text.index("attack") < text.index("defense")

    def test_encode_to_dict_record(self):
        data = yaml.safe_load(encode(Legacy("old", 3)))
        assert data == {"id": "old", "value": 3}

    def test_encoded_record_decodes_equal(self):
        codec = YamlCodec(strict=True)
        weapon = Weapon(identifier="axe", damage=7, tags=["heavy"], stats=Stats(2, 1))
        assert codec.decode(codec.encode(weapon), Weapon) == weapon

    def test_failing_to_dict(self):
        class Faulty:
            def to_dict(self):
                raise AttributeError("half built")

        with pytest.raises(EncodeError, match="Faulty.to_dict failed"):
            encode(Faulty())

    def test_unencodable_value(self):
        @dataclass
        class Holder:
            identifier: str
            payload: Any = None

        with pytest.raises(EncodeError):
            encode(Holder("h", payload=object()))
