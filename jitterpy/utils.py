import os
import time

from jitterpy.constants import PORT_DEFAULT


def parse_addr(addr, port=PORT_DEFAULT):
    """ Parse IP addresses and ports given on the command line.
        Works with:
            IPv6 address with and without port ([::1]:20000, ::1);
            IPv4 address with and without port (127.0.0.1:20000, 127.0.0.1);
            port only (:20000).
        Returns (host, port, ipversion), ipversion is 0 if no host was given.
    """
    if addr == '':
        return "", port, 0
    elif ']:' in addr:
        # IPv6 address with port
        ip, port = addr.rsplit(':', 1)
        return ip.strip('[]'), int(port), 6
    elif ']' in addr:
        # IPv6 address without port
        return addr.strip('[]'), port, 6
    elif addr.count(':') > 1:
        # IPv6 address without port
        return addr, port, 6
    elif addr.startswith(':'):
        # port only
        return "", int(addr[1:]), 0
    elif ':' in addr:
        # IPv4 address with port
        ip, port = addr.split(':')
        return ip, int(port), 4
    else:
        # IPv4 address without port
        return addr, port, 4


def wildcard(ipversion):
    return "::" if ipversion == 6 else "0.0.0.0"


def now():
    return time.time()


def generate_zero_bytes(nbr):
    return bytes(nbr)


def generate_random_bytes(nbr):
    return os.urandom(nbr)


def format_time(ms):
    if abs(ms) > 60000:
        return "%7.1fmin" % float(ms / 60000)
    if abs(ms) > 10000:
        return "%7.1fsec" % float(ms / 1000)
    if abs(ms) > 1000:
        return "%7.2fsec" % float(ms / 1000)
    if abs(ms) > 1:
        return "%8.2fms" % ms
    return "%8dus" % int(ms * 1000)
