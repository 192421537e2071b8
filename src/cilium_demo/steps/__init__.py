"""Provisioning steps, listed in the order setup runs them."""

from .application import DeployApplication  # noqa: F401
from .base import Step, StepContext  # noqa: F401
from .cluster import CreateCluster, RemoveStaleEnvironment  # noqa: F401
from .cni import (  # noqa: F401
    ConfigureL2Announcements,
    ConfigureLoadBalancerPool,
    InstallCilium,
    InstallGatewayAPICRDs,
)
from .gateway import DeployGateway  # noqa: F401
from .preload import PreloadImages  # noqa: F401
from .prerequisites import CheckPrerequisites  # noqa: F401
from .router import ConfigureBGPPeering, DeployRouter  # noqa: F401
from .verify import ShowSummary, VerifyBGP, VerifyDeployment  # noqa: F401

SETUP_STEPS = (
    CheckPrerequisites,
    RemoveStaleEnvironment,
    CreateCluster,
    PreloadImages,
    InstallGatewayAPICRDs,
    InstallCilium,
    ConfigureL2Announcements,
    ConfigureLoadBalancerPool,
    DeployApplication,
    DeployRouter,
    ConfigureBGPPeering,
    DeployGateway,
    VerifyDeployment,
    VerifyBGP,
    ShowSummary,
)

__all__ = ["SETUP_STEPS", "Step", "StepContext"]
