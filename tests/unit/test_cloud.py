"""Unit tests for cloud cluster id lookups."""

import json
from unittest.mock import MagicMock, patch

import pytest

from kubeprime_cli.bootstrap.cloud import ibmcloud_cluster_id, iks_cluster_id, kube_cluster_id
from kubeprime_cli.errors import CommandError, KubeprimeError


@pytest.mark.cli_unit
class TestClusterId:
    """Tests for IKS cluster id lookups."""

    def test_from_cluster_info(self):
        kubectl = MagicMock()
        kubectl.get_config_map_data.return_value = {
            "cluster-config.json": json.dumps({"cluster_id": "bq1f2"})
        }
        assert kube_cluster_id(kubectl) == "bq1f2"
        kubectl.get_config_map_data.assert_called_once_with("cluster-info", "kube-system")

    def test_cluster_info_missing(self):
        kubectl = MagicMock()
        kubectl.get_config_map_data.return_value = {}
        assert kube_cluster_id(kubectl) == ""

    def test_cluster_info_unreadable(self):
        kubectl = MagicMock()
        kubectl.get_config_map_data.side_effect = CommandError(command=["kubectl"])
        assert kube_cluster_id(kubectl) == ""

    def test_ibmcloud(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps({"id": "xyz"}))
            assert ibmcloud_cluster_id("mycluster") == "xyz"

        assert "--cluster" in mock_run.call_args[0][0]

    def test_ibmcloud_without_id(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="{}")
            with pytest.raises(KubeprimeError):
                ibmcloud_cluster_id("mycluster")

    def test_falls_back_to_ibmcloud(self):
        kubectl = MagicMock()
        kubectl.get_config_map_data.return_value = {}
        with patch("kubeprime_cli.bootstrap.cloud.ibmcloud_cluster_id", return_value="xyz") as lookup:
            assert iks_cluster_id(kubectl, "mycluster") == "xyz"
        lookup.assert_called_once_with("mycluster")
