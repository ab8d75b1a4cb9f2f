"""
Domain Validator Module

Checks the mail-related DNS signals of a domain: MX, SPF and DMARC.
"""

from typing import Iterable, Optional, Tuple
from dataclasses import dataclass

from .dns_service import DNSServiceBase

SPF_PREFIX = 'v=spf1'
DMARC_PREFIX = 'v=DMARC1'
DMARC_LABEL = '_dmarc'


@dataclass(frozen=True)
class DomainReport:
    """
    DNS findings for a single domain.

    Attributes:
        has_mx: Whether the domain has at least one MX record
        has_spf: Whether a TXT record starting with v=spf1 was found
        spf_record: Text of the first SPF record, empty if none
        has_dmarc: Whether _dmarc.<domain> has a record starting with v=DMARC1
        dmarc_record: Text of the first DMARC record, empty if none
    """
    has_mx: bool
    has_spf: bool
    spf_record: str
    has_dmarc: bool
    dmarc_record: str


def find_record(records: Iterable[str], prefix: str) -> Optional[str]:
    """Return the first record starting with prefix, in the order given."""
    for record in records:
        if record.startswith(prefix):
            return record
    return None


class DomainValidator:
    """
    Runs the MX, SPF and DMARC lookups for a domain.

    The three lookups always run, one after another, so the SPF and DMARC
    findings are reported even for a domain without MX records.

    Example:
        >>> dns_service = MockDNSService(mx={'example.com': True})
        >>> DomainValidator(dns_service).validate('example.com').has_mx
        True
    """

    def __init__(self, dns_service: DNSServiceBase):
        self.dns_service = dns_service

    def check_mx(self, domain: str) -> bool:
        return self.dns_service.has_mx_record(domain)

    def check_spf(self, domain: str) -> Tuple[bool, str]:
        record = find_record(self.dns_service.get_txt_records(domain), SPF_PREFIX)
        if record is None:
            return False, ''
        return True, record

    def check_dmarc(self, domain: str) -> Tuple[bool, str]:
        name = f'{DMARC_LABEL}.{domain}'
        record = find_record(self.dns_service.get_txt_records(name), DMARC_PREFIX)
        if record is None:
            return False, ''
        return True, record

    def validate(self, domain: str) -> DomainReport:
        """
        Collect the DNS findings for a domain.

        Args:
            domain: The domain part of an email address

        Returns:
            DomainReport with the MX, SPF and DMARC results
        """
        has_mx = self.check_mx(domain)
        has_spf, spf_record = self.check_spf(domain)
        has_dmarc, dmarc_record = self.check_dmarc(domain)

        return DomainReport(
            has_mx=has_mx,
            has_spf=has_spf,
            spf_record=spf_record,
            has_dmarc=has_dmarc,
            dmarc_record=dmarc_record
        )
