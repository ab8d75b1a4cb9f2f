"""
Email Verifier Module

Contains the EmailVerifier class that checks an address's format and the
DNS records of its domain.
"""

import logging
import re
from typing import Dict, Any
from dataclasses import dataclass

from .domain_validator import DomainValidator

logger = logging.getLogger(__name__)

INVALID_FORMAT_REASON = 'Invalid email format'
NO_MX_REASON = 'Domain does not have valid MX records'


@dataclass(frozen=True)
class VerificationResult:
    """
    Represents the result of an email verification.

    Attributes:
        valid: Whether the email looks deliverable
        reason: Why the email is not valid, empty when valid
        has_mx: Whether the domain has MX records
        has_spf: Whether the domain publishes an SPF record
        spf_record: The SPF record text, empty if none
        has_dmarc: Whether the domain publishes a DMARC record
        dmarc_record: The DMARC record text, empty if none
    """
    valid: bool
    reason: str = ''
    has_mx: bool = False
    has_spf: bool = False
    spf_record: str = ''
    has_dmarc: bool = False
    dmarc_record: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to the response format, dropping empty strings."""
        data = {'valid': self.valid}
        if self.reason:
            data['reason'] = self.reason
        data['hasMX'] = self.has_mx
        data['hasSPF'] = self.has_spf
        if self.spf_record:
            data['spfRecord'] = self.spf_record
        data['hasDMARC'] = self.has_dmarc
        if self.dmarc_record:
            data['dmarcRecord'] = self.dmarc_record
        return data


class EmailVerifier:
    """
    Verifies an email address by format and by its domain's DNS records.

    An address is valid when it matches EMAIL_REGEX and its domain has at
    least one MX record. SPF and DMARC are reported but do not affect
    validity.

    Example:
        >>> dns_service = MockDNSService(mx={'example.com': True})
        >>> verifier = EmailVerifier(DomainValidator(dns_service))
        >>> verifier.verify('user@example.com').valid
        True
    """

    # Deliberately permissive, not a full RFC 5322 grammar
    EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

    def __init__(self, domain_validator: DomainValidator):
        self.domain_validator = domain_validator

    def is_valid_format(self, email: str) -> bool:
        # fullmatch so that "$" cannot match before a trailing newline
        return self.EMAIL_REGEX.fullmatch(email) is not None

    def verify(self, email: str) -> VerificationResult:
        """
        Verify an email address.

        Domain lookups are skipped entirely when the format check fails.

        Args:
            email: The email address to verify

        Returns:
            VerificationResult object with verification details
        """
        if not self.is_valid_format(email):
            logger.debug("Rejected email with invalid format")
            return VerificationResult(valid=False, reason=INVALID_FORMAT_REASON)

        domain = email.split('@', 1)[1]
        report = self.domain_validator.validate(domain)

        reason = '' if report.has_mx else NO_MX_REASON
        logger.debug(
            "Verified domain %s: mx=%s spf=%s dmarc=%s",
            domain, report.has_mx, report.has_spf, report.has_dmarc
        )

        return VerificationResult(
            valid=report.has_mx,
            reason=reason,
            has_mx=report.has_mx,
            has_spf=report.has_spf,
            spf_record=report.spf_record,
            has_dmarc=report.has_dmarc,
            dmarc_record=report.dmarc_record
        )
