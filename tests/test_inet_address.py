import pytest

from reactornet.inet_address import InetAddress


def test_defaults():
    addr = InetAddress()
    assert addr.to_ip() == "127.0.0.1"
    assert addr.to_port() == 8080
    assert addr.to_ip_port() == "127.0.0.1:8080"


def test_port_only():
    addr = InetAddress(9981)
    assert addr.to_port() == 9981
    assert addr.to_ip() == "127.0.0.1"


def test_explicit_ip():
    addr = InetAddress(80, "10.0.0.1")
    assert addr.to_ip_port() == "10.0.0.1:80"
    assert addr.sockaddr() == ("10.0.0.1", 80)


def test_round_trip_through_sockaddr():
    addr = InetAddress(1234, "192.168.1.20")
    assert InetAddress.from_sockaddr(addr.sockaddr()) == addr


def test_from_sockaddr_ignores_extra_fields():
    addr = InetAddress.from_sockaddr(("127.0.0.1", 5555, 0, 0))
    assert addr.to_port() == 5555


def test_unparsable_ip_becomes_none_address():
    assert InetAddress(1, "not-an-ip").to_ip() == "255.255.255.255"


@pytest.mark.parametrize("port", [-1, 65536])
def test_port_out_of_range(port):
    with pytest.raises(ValueError):
        InetAddress(port)


def test_equality_and_hash():
    assert InetAddress(1, "1.2.3.4") == InetAddress(1, "1.2.3.4")
    assert InetAddress(1, "1.2.3.4") != InetAddress(2, "1.2.3.4")
    assert len({InetAddress(1, "1.2.3.4"), InetAddress(1, "1.2.3.4")}) == 1