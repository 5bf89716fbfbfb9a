"""Tests rendering the templates of the examples directory."""

import base64
import json
import logging
import os

import yaml

from ztp.template import new_template

ASSISTED_DIR = os.path.join(os.path.dirname(__file__), "..", "examples", "assisted-manifests")


class TestAssistedManifests:
    """Test cases for the assisted installer manifests example."""

    def setup_method(self):
        """Build the template set and load the example values."""
        self.template = (
            new_template()
            .set_logger(logging.getLogger("templates.tests"))
            .set_fs(ASSISTED_DIR)
            .set_dir("templates")
            .build()
        )
        with open(os.path.join(ASSISTED_DIR, "values.yaml")) as f:
            self.values = yaml.safe_load(f)

    def test_names(self):
        """Test that all the example templates are found."""
        assert self.template.names() == [
            "_envelope.json",
            "manifests/54-scheduler-override.yaml",
            "manifests/cluster-infrastructure-02-config.yml",
            "upload/54-scheduler-override.json",
            "upload/cluster-infrastructure-02-config.json",
        ]

    def test_infrastructure_manifest(self):
        """Test that the infrastructure manifest is valid YAML with the topology."""
        manifest = yaml.safe_load(
            self.template.render("manifests/cluster-infrastructure-02-config.yml", self.values)
        )
        assert manifest["kind"] == "Infrastructure"
        assert manifest["status"]["infrastructureTopology"] == "HighlyAvailable"
        assert manifest["spec"]["platformSpec"]["type"] == "BareMetal"

    def test_upload_document(self):
        """Test that the upload document embeds the rendered manifest in Base64."""
        document = json.loads(
            self.template.render("upload/cluster-infrastructure-02-config.json", self.values)
        )
        assert document["file_name"] == "cluster-infrastructure-02-config.yml"
        assert document["folder"] == "manifests"
        content = base64.b64decode(document["content"])
        assert content == self.template.render(
            "manifests/cluster-infrastructure-02-config.yml", self.values
        )

    def test_scheduler_upload_document(self):
        """Test the scheduler override upload document."""
        document = json.loads(self.template.render("upload/54-scheduler-override.json", self.values))
        manifest = yaml.safe_load(base64.b64decode(document["content"]))
        assert manifest["kind"] == "Scheduler"
        assert manifest["spec"]["mastersSchedulable"] is False
