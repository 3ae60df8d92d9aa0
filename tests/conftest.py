"""Shared fixtures for l2craft tests."""
import pytest

from l2craft.config_engine import ConfigEngine

# Line numbers matter: tests assert on them.
BASE_CONFIG = """\
interface FortyGigE0/0/0/46
  description To:server1
  mtu 9216
interface FortyGigE0/0/0/46.300 l2transport
  description servers,To:server1
  encapsulation dot1q 300
  rewrite ingress tag pop 1 symmetric
interface FortyGigE0/0/0/47
  description To:server2
interface Bundle-Ether100
  description To:core
interface TenGigE0/0/0/1
  description core-link-a
  bundle id 100 mode active
interface BVI300
  description gw-servers
  ipv4 address 192.0.2.1 255.255.255.0
!
l2vpn
  bridge group VLAN
    bridge-domain VLAN300
      description servers
      interface FortyGigE0/0/0/46.300
      !
      routed interface BVI300
    !
  !
!
"""


@pytest.fixture
def base_config() -> str:
    """Base config with one trunk, one plain port, a bundle and a BVI."""
    return BASE_CONFIG


@pytest.fixture
def engine() -> ConfigEngine:
    """Engine with default settings."""
    return ConfigEngine()
