"""Tests for the compatibility policy."""

import pytest

from meshwarden.core.exceptions import (
    IncompatibilityError,
    PilotVersionMismatchError,
    VersionParseError,
)
from meshwarden.core.models import Direction
from meshwarden.core.version import SemanticVersion
from meshwarden.policy.compatibility import (
    Compatible,
    Incompatible,
    can_install,
    can_uninstall,
    can_update,
    client_compatible_with_target,
    component_compatible,
    ensure_can_reset_proxies,
    within_one_minor,
)


class TestWithinOneMinor:
    """Tests for the compatibility primitive."""

    @pytest.mark.parametrize(
        "first,second,expected",
        [
            ("1.11.0", "1.10.7", True),
            ("1.11.0", "1.12.3", True),
            ("1.11.4", "1.11.0", True),
            ("1.11.0", "1.9.0", False),
            ("1.11.0", "1.13.0", False),
            ("1.11.0", "2.11.0", False),
        ],
    )
    def test_window(self, first: str, second: str, expected: bool) -> None:
        """Test the window is inclusive and symmetric."""
        a = SemanticVersion.parse(first)
        b = SemanticVersion.parse(second)

        assert within_one_minor(a, b) is expected
        assert within_one_minor(b, a) is expected


class TestComponentCompatible:
    """Tests for component_compatible."""

    def test_empty_component_is_compatible(self) -> None:
        """Test absent component is vacuously compatible."""
        result = component_compatible("", "1.2.0", "Pilot")

        assert isinstance(result, Compatible)
        assert result.is_compatible

    def test_malformed_version_raises(self) -> None:
        """Test parse failures propagate."""
        with pytest.raises(VersionParseError):
            component_compatible("1.2", "1.2.0", "Pilot")

        with pytest.raises(VersionParseError):
            component_compatible("1.2.0", "latest", "Pilot")

    @pytest.mark.parametrize("component", ["1.2.0", "1.2.9", "1.1.0", "1.3.5"])
    def test_compatible(self, component: str) -> None:
        """Test versions within one minor are compatible."""
        assert component_compatible(component, "1.2.0", "Pilot").is_compatible

    def test_upgrade_direction(self) -> None:
        """Test target far above component is an upgrade."""
        result = component_compatible("1.0.0", "1.2.0", "Pilot")

        assert isinstance(result, Incompatible)
        assert result.direction is Direction.UPGRADE
        assert result.component == "Pilot"
        assert result.component_version == "1.0.0"
        assert result.target_version == "1.2.0"

    def test_downgrade_direction(self) -> None:
        """Test target far below component is a downgrade."""
        result = component_compatible("1.4.0", "1.2.0", "Data plane")

        assert isinstance(result, Incompatible)
        assert result.direction is Direction.DOWNGRADE

    def test_error_message(self) -> None:
        """Test the diagnostic names component, versions and direction."""
        result = component_compatible("1.0.0", "1.2.0", "Pilot")
        error = result.to_error()

        assert isinstance(error, IncompatibilityError)
        assert error.component == "Pilot"
        assert error.direction is Direction.UPGRADE
        assert "upgrade for Pilot from version: 1.0.0 to version: 1.2.0" in str(error)


class TestCanInstall:
    """Tests for can_install."""

    def test_nothing_installed(self, make_status) -> None:
        """Test install allowed when pilot and data plane are absent."""
        assert can_install(make_status(client="", pilot="", data_plane=()))

    def test_pilot_installed(self, make_status) -> None:
        """Test install rejected when pilot is present."""
        assert not can_install(make_status(pilot="1.1.0"))

    def test_data_plane_only(self, make_status) -> None:
        """Test install rejected when only sidecars are present."""
        assert not can_install(make_status(data_plane=("1.1.0",)))


class TestCanUpdate:
    """Tests for can_update."""

    def test_pilot_two_minors_behind(self, make_status) -> None:
        """Test update rejected when pilot is two minors behind."""
        status = make_status(client="1.0.0", target="1.2.0", pilot="1.0.0", data_plane=("1.0.0",))
        result = can_update(status)

        assert not result.is_compatible
        assert result.component == "Pilot"
        assert result.direction is Direction.UPGRADE

    def test_pilot_one_minor_ahead(self, make_status) -> None:
        """Test permissible downgrade for pilot."""
        status = make_status(client="1.1.0", target="1.1.0", pilot="1.2.0", data_plane=("1.1.0",))

        assert can_update(status).is_compatible

    def test_pilot_two_minors_ahead(self, make_status) -> None:
        """Test downgrade beyond one minor is rejected."""
        status = make_status(client="1.1.0", target="1.1.0", pilot="1.3.0", data_plane=("1.1.0",))
        result = can_update(status)

        assert not result.is_compatible
        assert result.direction is Direction.DOWNGRADE

    def test_data_plane_one_minor_ahead(self, make_status) -> None:
        """Test permissible downgrade for data plane."""
        status = make_status(client="1.1.0", target="1.1.0", pilot="1.1.0", data_plane=("1.2.0",))

        assert can_update(status).is_compatible

    def test_data_plane_too_far_behind(self, make_status) -> None:
        """Test data plane two minors behind is rejected."""
        status = make_status(
            client="1.2.0", target="1.2.0", pilot="1.1.0", data_plane=("1.1.0", "1.0.0")
        )
        result = can_update(status)

        assert not result.is_compatible
        assert result.component == "Data plane"
        assert result.component_version == "1.0.0"

    def test_pilot_checked_before_data_plane(self, make_status) -> None:
        """Test the first incompatible component is the pilot."""
        status = make_status(target="1.4.0", pilot="1.1.0", data_plane=("1.0.0",))

        assert can_update(status).component == "Pilot"

    def test_all_versions_match(self, make_status) -> None:
        """Test update allowed when everything matches."""
        status = make_status(client="1.2.0", target="1.2.0", pilot="1.2.0", data_plane=("1.2.0",))

        assert can_update(status).is_compatible

    def test_control_plane_ahead_of_data_plane(self, make_status) -> None:
        """Test consistent control plane with lagging data plane."""
        status = make_status(
            client="1.2.0", target="1.2.0", pilot="1.2.0", data_plane=("1.1.0", "1.2.0")
        )

        assert can_update(status).is_compatible

    def test_malformed_data_plane_version(self, make_status) -> None:
        """Test malformed versions fail closed."""
        status = make_status(pilot="1.2.0", data_plane=("unknown",))

        with pytest.raises(VersionParseError):
            can_update(status)


class TestCanUninstall:
    """Tests for can_uninstall."""

    def test_installed_with_client(self, make_status) -> None:
        """Test uninstall allowed when installed and istioctl present."""
        assert can_uninstall(make_status(client="1.2.0", pilot="1.2.0", data_plane=("1.2.0",)))

    def test_installed_without_client(self, make_status) -> None:
        """Test uninstall rejected without istioctl."""
        assert not can_uninstall(make_status(client="", pilot="1.2.0"))

    def test_not_installed(self, make_status) -> None:
        """Test uninstall rejected when nothing is installed."""
        assert not can_uninstall(make_status(client="1.2.0", pilot="", data_plane=()))

    def test_divergent_versions_do_not_matter(self, make_status) -> None:
        """Test version drift does not block uninstall."""
        assert can_uninstall(make_status(client="1.5.0", pilot="1.0.0", data_plane=("1.3.0",)))


class TestEnsureCanResetProxies:
    """Tests for ensure_can_reset_proxies."""

    def test_pilot_mismatch(self, make_status) -> None:
        """Test pilot not at target is rejected."""
        with pytest.raises(PilotVersionMismatchError, match="pilot version 1.0.0"):
            ensure_can_reset_proxies(make_status(target="1.2.0", pilot="1.0.0"))

    def test_pilot_one_minor_behind_is_not_enough(self, make_status) -> None:
        """Test reset requires exact pilot version."""
        with pytest.raises(PilotVersionMismatchError):
            ensure_can_reset_proxies(make_status(target="1.2.0", pilot="1.1.0"))

    def test_pilot_patch_mismatch(self, make_status) -> None:
        """Test patch difference is a mismatch."""
        with pytest.raises(PilotVersionMismatchError):
            ensure_can_reset_proxies(make_status(target="1.2.1", pilot="1.2.0"))

    def test_data_plane_one_minor_behind(self, make_status) -> None:
        """Test lagging data plane within one minor is allowed."""
        ensure_can_reset_proxies(make_status(target="1.2.0", pilot="1.2.0", data_plane=("1.1.0",)))

    def test_data_plane_drift(self, make_status) -> None:
        """Test data plane two minors behind is rejected."""
        with pytest.raises(IncompatibilityError) as exc_info:
            ensure_can_reset_proxies(
                make_status(target="1.2.0", pilot="1.2.0", data_plane=("1.0.0",))
            )

        assert exc_info.value.component == "Data plane"

    def test_no_data_plane(self, make_status) -> None:
        """Test reset allowed without sidecars."""
        ensure_can_reset_proxies(make_status(target="1.2.0", pilot="1.2.0", data_plane=()))

    def test_target_with_prerelease(self, make_status) -> None:
        """Test suffix on the target is ignored."""
        ensure_can_reset_proxies(
            make_status(target="1.2.0-distroless", pilot="1.2.0", data_plane=("1.2.0",))
        )

    def test_pilot_missing(self, make_status) -> None:
        """Test empty pilot version fails closed."""
        with pytest.raises(VersionParseError):
            ensure_can_reset_proxies(make_status(target="1.2.0", pilot=""))


class TestClientCompatibleWithTarget:
    """Tests for client_compatible_with_target."""

    @pytest.mark.parametrize(
        "client,target",
        [
            ("1.2.0", "1.2.0"),
            ("1.2.3", "1.2.0"),
            ("1.2.0", "1.2.3"),
            ("1.3.0", "1.2.0"),
            ("1.2.0", "1.3.0"),
        ],
    )
    def test_compatible(self, make_status, client: str, target: str) -> None:
        """Test client within one minor of target."""
        assert client_compatible_with_target(make_status(client=client, target=target))

    @pytest.mark.parametrize("client,target", [("1.0.0", "1.2.0"), ("1.4.0", "1.2.0")])
    def test_incompatible(self, make_status, client: str, target: str) -> None:
        """Test client more than one minor away."""
        assert not client_compatible_with_target(make_status(client=client, target=target))

    @pytest.mark.parametrize("client,target", [("", "1.2.0"), ("1.2", "1.2.0"), ("1.2.0", "x")])
    def test_parse_failure_is_incompatible(self, make_status, client: str, target: str) -> None:
        """Test malformed versions fail closed."""
        assert not client_compatible_with_target(make_status(client=client, target=target))
