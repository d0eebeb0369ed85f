"""Helm Builder - package, publish and deploy Helm charts from CI.

The builder is driven by environment variables (Drone plugin style) and runs
an ordered list of actions against gcloud, gsutil, kubectl and helm:

- lint: Lint the chart
- create: Package the chart into ``<package>-<version>.tgz``
- push / pull: Copy the packaged chart to or from a GCS bucket
- dependency-update: Resolve the chart's dependencies
- deploy: Upgrade or install the release into the target namespace
- test: Run the release's Helm tests
"""

__version__ = "0.1.0"
