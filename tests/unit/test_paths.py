"""User path parsing."""

import pytest

from mindos.errors import InvalidInput
from mindos.users.paths import UserPath, parse_path


class TestParsePath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("builder", UserPath.BUILDER),
            ("Automator", UserPath.AUTOMATOR),
            ("dealmaker", UserPath.DEALMAKER),
            ("deal-maker", UserPath.DEALMAKER),
            ("deal_maker", UserPath.DEALMAKER),
            (UserPath.BUILDER, UserPath.BUILDER),
            (None, None),
            ("  ", None),
        ],
    )
    def test_known_values(self, raw, expected):
        assert parse_path(raw) is expected

    def test_unknown_path(self):
        with pytest.raises(InvalidInput):
            parse_path("wizard")
