"""Unit tests for InitFlags and ClusterConfig."""

from dataclasses import FrozenInstanceError, replace

import pytest

from kubeprime_cli.bootstrap.cluster_config import InitFlags
from kubeprime_cli.bootstrap.providers import (
    DEFAULT_INGRESS_DEPLOYMENT,
    DEFAULT_INGRESS_SERVICE,
    resolve,
)
from kubeprime_cli.errors import MissingOptionError


@pytest.mark.cli_unit
class TestNormalizeTillerFlags:
    """Tests for InitFlags.normalize_tiller_flags()."""

    def test_no_tiller_switches_to_client_only(self):
        flags = InitFlags(no_tiller=True)
        flags.normalize_tiller_flags()
        assert flags.helm_client_only is True
        assert flags.skip_tiller is True
        assert flags.global_tiller is False

    def test_local_tiller_switches_to_client_only(self):
        flags = InitFlags(no_tiller=False, remote_tiller=False)
        flags.normalize_tiller_flags()
        assert flags.helm_client_only is True
        assert flags.global_tiller is False

    def test_remote_tiller_kept(self):
        flags = InitFlags(no_tiller=False, remote_tiller=True)
        flags.normalize_tiller_flags()
        assert flags.helm_client_only is False
        assert flags.skip_tiller is False
        assert flags.global_tiller is True


@pytest.mark.cli_unit
class TestApplyHelm3:
    """Tests for InitFlags.apply_helm3()."""

    def test_helm3_disables_tiller(self):
        flags = InitFlags(helm3=True, no_tiller=False)
        flags.apply_helm3()
        assert flags.skip_tiller is True
        assert flags.no_tiller is True

    def test_idempotent(self):
        flags = InitFlags(helm3=True, no_tiller=False)
        flags.apply_helm3()
        first = replace(flags)
        flags.apply_helm3()
        assert flags == first

    def test_without_helm3_nothing_changes(self):
        flags = InitFlags(no_tiller=False)
        flags.apply_helm3()
        assert flags.skip_tiller is False
        assert flags.no_tiller is False


@pytest.mark.cli_unit
class TestApplyProfile:
    """Tests for InitFlags.apply_profile()."""

    def test_icp_overrides_namespaces_and_names(self):
        flags = InitFlags(namespace="", tiller_namespace="kube-system")
        flags.apply_profile(resolve("icp"))
        assert flags.ingress_service == "default-backend"
        assert flags.ingress_deployment == "default-backend"
        assert flags.tiller_namespace == "default"
        assert flags.namespace == "jx"

    def test_alibaba_renames_defaults(self):
        flags = InitFlags()
        flags.apply_profile(resolve("alibaba"))
        assert flags.ingress_deployment == "nginx-ingress-controller"
        assert flags.ingress_service == "nginx-ingress-lb"

    def test_alibaba_keeps_custom_names(self):
        flags = InitFlags(ingress_service="my-svc", ingress_deployment="my-deploy")
        flags.apply_profile(resolve("alibaba"))
        assert flags.ingress_service == "my-svc"
        assert flags.ingress_deployment == "my-deploy"

    def test_generic_profile_changes_nothing(self):
        flags = InitFlags()
        flags.apply_profile(resolve("kubernetes"))
        assert flags.ingress_service == DEFAULT_INGRESS_SERVICE
        assert flags.ingress_deployment == DEFAULT_INGRESS_DEPLOYMENT


@pytest.mark.cli_unit
class TestFinalize:
    """Tests for InitFlags.finalize()."""

    def test_returns_frozen_config(self):
        config = InitFlags(provider="gke").finalize()
        assert config.provider == "gke"
        with pytest.raises(FrozenInstanceError):
            config.namespace = "other"

    def test_profile_kept_as_object(self):
        flags = InitFlags(provider="aws")
        flags.apply_profile(resolve("aws"))
        config = flags.finalize()
        assert config.profile is resolve("aws")

    def test_global_tiller_without_namespace(self):
        flags = InitFlags(no_tiller=False, skip_tiller=False, global_tiller=True, tiller_namespace="")
        with pytest.raises(MissingOptionError) as exc_info:
            flags.finalize()
        assert str(exc_info.value) == "Missing option: --tiller-namespace"

    def test_skip_tiller_does_not_need_tiller_namespace(self):
        flags = InitFlags(skip_tiller=True, global_tiller=True, tiller_namespace="")
        config = flags.finalize()
        assert config.global_tiller is False

    def test_helm3_does_not_need_tiller_namespace(self):
        flags = InitFlags(helm3=True, no_tiller=False, tiller_namespace="")
        config = flags.finalize()
        assert config.skip_tiller is True

    def test_namespace_from_current_context(self):
        flags = InitFlags(namespace="")
        config = flags.finalize(current_namespace=lambda: "team-a")
        assert config.namespace == "team-a"

    def test_missing_namespace(self):
        flags = InitFlags(namespace="")
        with pytest.raises(MissingOptionError) as exc_info:
            flags.finalize(current_namespace=lambda: "")
        assert exc_info.value.option == "namespace"
