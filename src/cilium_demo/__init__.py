"""Local Cilium BGP / Gateway API demo lab.

The package drives a throwaway environment made of:

* a Kind cluster created from a declarative node topology;
* Cilium installed from Helm with Gateway API, BGP, L2 announcements and
  Hubble enabled, with its images pre-loaded into the nodes;
* an FRR container on the ``kind`` docker network peering with every worker
  node; and
* a small "boutique" application exposed through a Gateway.

Everything external (``docker``, ``kind``, ``kubectl``, ``helm``,
``cilium``, ``mkcert``) is invoked as a CLI through
:class:`cilium_demo.runner.CommandRunner`, so the sequencing logic can be
unit tested without any of those tools installed.
"""

from .sequencer import SetupSequencer  # noqa: F401

__all__ = ["SetupSequencer"]
