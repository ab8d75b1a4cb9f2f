"""
Email Verifier Package

Provides email verification with format checking and DNS MX, SPF and DMARC lookups.
"""

from .verifier import EmailVerifier, VerificationResult
from .domain_validator import DomainValidator, DomainReport
from .dns_service import DNSService, MockDNSService

__all__ = [
    'EmailVerifier',
    'VerificationResult',
    'DomainValidator',
    'DomainReport',
    'DNSService',
    'MockDNSService',
]
__version__ = '1.0.0'
