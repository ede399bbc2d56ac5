"""
policy/defaults.py

Default insecure-service catalog, used until a user policy is saved.
"""

from __future__ import annotations

from ..models import InsecurePortSetting, Severity

_H, _M, _L = Severity.HIGH, Severity.MEDIUM, Severity.LOW

# (port, label, criticality, rationale)
_CATALOG: list[tuple[int, str, Severity, str]] = [
    # High
    (21,    "FTP",          _H, "Cleartext credentials & data"),
    (23,    "Telnet",       _H, "Cleartext remote login"),
    (25,    "SMTP",         _H, "No encryption by default, abuse vector"),
    (69,    "TFTP",         _H, "No authentication"),
    (110,   "POP3",         _H, "Cleartext credentials"),
    (119,   "NNTP",         _H, "Cleartext & legacy"),
    (137,   "NetBIOS NS",   _H, "Windows enumeration"),
    (138,   "NetBIOS DGM",  _H, "Lateral movement"),
    (139,   "NetBIOS SSN",  _H, "SMB attacks"),
    (143,   "IMAP",         _H, "Cleartext authentication"),
    (161,   "SNMP v1/v2",   _H, "Weak auth, info disclosure"),
    (162,   "SNMP Trap",    _H, "Data leakage"),
    (389,   "LDAP",         _H, "Cleartext directory access"),
    (445,   "SMB",          _H, "Ransomware, lateral movement"),
    (512,   "rexec",        _H, "Remote command execution"),
    (513,   "rlogin",       _H, "Trust-based auth"),
    (514,   "rsh",          _H, "No auth, cleartext"),
    (2049,  "NFS",          _H, "No encryption/auth by default"),
    (6000,  "X11",          _H, "Remote desktop hijacking"),
    # Medium
    (20,    "FTP Data",     _M, "Same risks as FTP"),
    (22,    "SSH",          _M, "Weak ciphers possible in legacy configs"),
    (37,    "Time",         _M, "Information disclosure"),
    (53,    "DNS",          _M, "Amplification attacks"),
    (80,    "HTTP",         _M, "Cleartext web traffic"),
    (109,   "POP2",         _M, "Obsolete & cleartext"),
    (179,   "BGP",          _M, "Routing attacks if exposed"),
    (500,   "ISAKMP",       _M, "VPN enumeration"),
    (1900,  "SSDP",         _M, "Reflection attacks"),
    (3306,  "MySQL",        _M, "Cleartext auth possible"),
    (3389,  "RDP",          _M, "Brute force attacks"),
    (5900,  "VNC",          _M, "Weak/no encryption"),
    (8080,  "HTTP Proxy",   _M, "Often misconfigured"),
    # Low
    (123,   "NTP",          _L, "Amplification if open"),
    (135,   "RPC",          _L, "Info leakage"),
    (636,   "LDAPS",        _L, "Secure if configured"),
    (989,   "FTPS Data",    _L, "Encrypted FTP"),
    (990,   "FTPS Control", _L, "Encrypted FTP"),
    (993,   "IMAPS",        _L, "Encrypted IMAP"),
    (995,   "POP3S",        _L, "Encrypted POP3"),
    (1433,  "MSSQL",        _L, "Internal DB access risk"),
    (1521,  "Oracle DB",    _L, "Internal only - should not be routed"),
    (27017, "MongoDB",      _L, "Secure if auth enabled"),
]

DEFAULT_INSECURE_PORTS: tuple[InsecurePortSetting, ...] = tuple(
    InsecurePortSetting(port=port, label=label, criticality=crit, rationale=why)
    for port, label, crit, why in _CATALOG
)
