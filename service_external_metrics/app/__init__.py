"""
External Metrics Service package.

Serves the Kubernetes external metrics API (external.metrics.k8s.io) backed
by New Relic application throughput, so a HorizontalPodAutoscaler can scale
on requests per minute.
"""
