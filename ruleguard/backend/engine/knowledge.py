"""
engine/knowledge.py

Offline knowledge base: explanation / recommendation text for every finding
the engine can emit.

Tables are built once at import and exposed read-only. Lookups always
return something: ports or tiers without a specific entry get a generic
fallback.

References used in the text: MITRE ATT&CK, NIST SP 800-41 / 800-53 / 800-207,
CIS Critical Security Controls, OWASP, CWE.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class Guidance:
    explanation: str
    recommendation: str


class ExposureTier(str, Enum):
    ANY_ANY         = "ANY_ANY"
    ANY_SOURCE      = "ANY_SOURCE"
    ANY_DESTINATION = "ANY_DESTINATION"
    BROAD_SERVICE   = "BROAD_SERVICE"


class HygieneKind(str, Enum):
    SHADOWING   = "SHADOWING"
    CONFLICT    = "CONFLICT"
    LATENT_RISK = "LATENT_RISK"


# ---------------------------------------------------------------------------
# Excessive exposure tiers
# ---------------------------------------------------------------------------

_GENERIC_EXPOSURE = Guidance(
    explanation=(
        "The rule matches more traffic than its purpose requires, which widens "
        "the attack surface available to an adversary."
    ),
    recommendation="Narrow the rule to the sources, destinations and services it actually needs.",
)

EXPOSURE: Mapping[ExposureTier, Guidance] = MappingProxyType({
    ExposureTier.ANY_ANY: Guidance(
        explanation=(
            "Critical security control failure. Allowing 'ANY' source, destination "
            "and service leaves the firewall effectively transparent. This violates "
            "NIST SP 800-53 AC-4 (Information Flow Enforcement) and is the primary "
            "vector for MITRE ATT&CK T1133 (External Remote Services). It offers no "
            "resistance to automated reconnaissance or lateral movement."
        ),
        recommendation=(
            "Immediate remediation required: split the rule into specific "
            "micro-segments and implement explicit allow lists (CIS Control 4.4) "
            "for known-good address ranges and services only."
        ),
    ),
    ExposureTier.ANY_SOURCE: Guidance(
        explanation=(
            "Unrestricted ingress exposure. A source of 'ANY' makes the rule "
            "reachable from any routed network, often the entire internet. "
            "Improper access control (CWE-284) gives global scanning botnets a "
            "target (MITRE T1595, Active Scanning)."
        ),
        recommendation=(
            "Restrict the source to specific authorised CIDR blocks or geofenced "
            "ranges. Put remote access behind an MFA-backed VPN (NIST AC-17)."
        ),
    ),
    ExposureTier.ANY_DESTINATION: Guidance(
        explanation=(
            "Blast radius escalation. A destination of 'ANY' lets traffic reach "
            "internal management subnets, database zones or domain controllers. "
            "It bypasses network segmentation (NIST SP 800-125B) and opens MITRE "
            "T1021 (Remote Services) lateral movement paths."
        ),
        recommendation=(
            "Narrow the destination to the specific host or host group required. "
            "Audit destination zones so traffic does not bridge high-trust and "
            "low-trust boundaries."
        ),
    ),
    ExposureTier.BROAD_SERVICE: Guidance(
        explanation=(
            "Broad protocol or port access ('ANY') detected. This increases the "
            "attack surface for specialised payloads and facilitates T1046 "
            "(Network Service Discovery)."
        ),
        recommendation="Restrict the rule to only the required ports and protocols (CIS Control 4.4).",
    ),
})


def exposure_guidance(tier: ExposureTier | str) -> Guidance:
    try:
        return EXPOSURE[ExposureTier(tier)]
    except ValueError:
        return _GENERIC_EXPOSURE


# ---------------------------------------------------------------------------
# Subnet scope
# ---------------------------------------------------------------------------

def subnet_guidance(prefix: int) -> Guidance:
    return Guidance(
        explanation=(
            f"Excessive blast radius (/{prefix}). A network segment this large "
            "typically contains hundreds or thousands of hosts. Such a broad trust "
            "relationship facilitates MITRE T1046 (Network Service Discovery) and "
            "large-scale lateral movement (T1021), and contradicts the Zero Trust "
            "principles of NIST SP 800-207."
        ),
        recommendation=(
            "Segment the network into smaller VLANs or subnets (typically /24 or "
            "smaller). Use host-based firewalling or micro-segmentation to limit "
            "peer-to-peer traffic inside the subnet."
        ),
    )


# ---------------------------------------------------------------------------
# Port-specific risk
# ---------------------------------------------------------------------------

PORT_RISKS: Mapping[int, str] = MappingProxyType({
    21: (
        "FTP: legacy cleartext protocol. Susceptible to MITRE T1557.002 "
        "(Adversary-in-the-Middle) and CWE-319. Credentials and data travel in "
        "plaintext, contrary to NIST SP 800-52 requirements for sensitive data."
    ),
    22: (
        "SSH: secure in itself, but direct internet exposure is discouraged by "
        "CIS Benchmark 1.1. Brute force (T1110) is common. Restrict to jump "
        "hosts (bastions) only."
    ),
    23: (
        "Telnet: insecure administrative protocol, superseded by SSH (NIST SP "
        "800-53 IA-2). Plaintext management credentials are trivially captured "
        "through MITRE T1040 (Network Sniffing)."
    ),
    80: (
        "HTTP: unencrypted web traffic (CWE-319). Enables session hijacking and "
        "credential theft (T1557). OWASP recommends enforcing HTTPS (TLS 1.2+) "
        "everywhere."
    ),
    445: (
        "SMB/CIFS: very high risk for lateral movement. Associated with MITRE "
        "T1021.002 and ransomware such as WannaCry (EternalBlue). CIS Control 12 "
        "recommends blocking SMB at network boundaries to prevent NTLM relay and "
        "remote file execution."
    ),
    1433: (
        "MSSQL: high-value target for data exfiltration (MITRE T1020). SQL "
        "injection can escalate if the listener is exposed to untrusted segments."
    ),
    3306: (
        "MySQL: database exposure. Facilitates MITRE T1190 (Exploit "
        "Public-Facing Application). Direct network access to databases should "
        "never cross security zones."
    ),
    3389: (
        "RDP: primary entry point for ransomware, mapped to MITRE T1133. RDP "
        "without NLA or MFA is a critical finding under CIS Control 4 and invites "
        "brute force (T1110) and BlueKeep-style exploits."
    ),
})

INSECURE_PORT_RECOMMENDATION = (
    "Transition to secure alternatives (e.g. SFTP instead of FTP, SSH instead of "
    "Telnet). If the service is required, restrict access to a dedicated trusted "
    "admin subnet and apply deep packet inspection (DPI)."
)


def port_explanation(port: int) -> str:
    """Port-specific risk text, or a generic sentence naming the port."""
    text = PORT_RISKS.get(port)
    if text is not None:
        return text
    return (
        f"Protocol/Port {port} is flagged as insecure or high-risk for enterprise "
        "environments. Access to this port increases the threat profile of the "
        "host and facilitates potential MITRE ATT&CK techniques."
    )


# ---------------------------------------------------------------------------
# Policy hygiene
# ---------------------------------------------------------------------------

HYGIENE: Mapping[HygieneKind, Guidance] = MappingProxyType({
    HygieneKind.SHADOWING: Guidance(
        explanation=(
            "Rule shadowing (NIST SP 800-41): the rule is fully eclipsed by a "
            "preceding rule with identical or broader criteria and can never "
            "match. Redundant rules lengthen policy lookup and create "
            "configuration sprawl that hides the intended security posture."
        ),
        recommendation=(
            "Remove the shadowed rule. Consolidate overlapping rules with object "
            "groups (address and service sets) to keep the policy lean (CIS "
            "Control 12)."
        ),
    ),
    HygieneKind.CONFLICT: Guidance(
        explanation=(
            "Policy logic conflict: two rules cover the same traffic but mandate "
            "different actions. Under first-match evaluation the outcome depends "
            "only on rule order, so a later reordering can silently grant "
            "unauthorised access. This complicates incident response and "
            "compliance reporting."
        ),
        recommendation=(
            "Standardise rule order: place specific deny rules above broader "
            "allow rules and finish each zone pair with an explicit default deny."
        ),
    ),
    HygieneKind.LATENT_RISK: Guidance(
        explanation=(
            "Latent exposure: this rule is disabled but carries broad 'ANY' "
            "criteria. Disabled rules are often re-enabled during troubleshooting "
            "and forgotten, or used by an adversary with administrative access "
            "(MITRE T1562.001, Impair Defenses) to open a backdoor without "
            "creating a new rule."
        ),
        recommendation=(
            "Purge policy debt: delete rules that have stayed disabled for more "
            "than 90 days and keep the configuration minimal (CIS Control 12)."
        ),
    ),
})


def hygiene_guidance(kind: HygieneKind) -> Guidance:
    return HYGIENE[kind]
