#!/usr/bin/env python3
"""
Performance Benchmark for Email Verifier

Measures verifications per second in-process, with DNS answered by
MockDNSService so only format checking and record scanning are timed.
"""

import time
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from email_verifier import EmailVerifier, DomainValidator, MockDNSService

VALID_EMAILS = [
    "user@example.com",
    "john.doe@company.org",
    "alice123@gmail.com",
    "bob_smith@yahoo.com",
    "charlie.brown@outlook.com",
]

INVALID_EMAILS = [
    "plainaddress",
    "@missing-local.com",
    "user@",
    "user@@domain.com",
    "user@.com",
]

ALL_EMAILS = VALID_EMAILS + INVALID_EMAILS


def build_dns():
    """Mock DNS with MX, a few unrelated TXT records, SPF and DMARC for every valid domain."""
    dns = MockDNSService()
    for email in VALID_EMAILS:
        domain = email.split('@', 1)[1]
        dns.set_mx(domain, True)
        dns.set_txt(domain, [
            'google-site-verification=abcdef',
            'MS=ms12345678',
            'v=spf1 include:_spf.example.com ~all',
        ])
        dns.set_txt(f'_dmarc.{domain}', ['v=DMARC1; p=none'])
    return dns


def benchmark(verifier, emails, iterations=10000):
    """Run benchmark and return statistics."""
    start_time = time.perf_counter()

    for _ in range(iterations):
        for email in emails:
            verifier.verify(email)

    total_time = time.perf_counter() - start_time
    total_requests = iterations * len(emails)

    return {
        'total_time': total_time,
        'total_requests': total_requests,
        'rps': total_requests / total_time,
        'avg_time_ms': (total_time / total_requests) * 1000
    }


def report(title, result):
    print(f"\n{title}")
    print(f"  Total time: {result['total_time']:.3f}s")
    print(f"  Total requests: {result['total_requests']}")
    print(f"  RPS: {result['rps']:,.0f} requests/second")
    print(f"  Avg time: {result['avg_time_ms']:.4f}ms")


def main():
    print("=" * 60)
    print("Email Verifier Performance Benchmark")
    print("=" * 60)

    dns = build_dns()
    verifier = EmailVerifier(DomainValidator(dns))

    print("\n[Warmup] Running 1000 iterations...")
    benchmark(verifier, ALL_EMAILS, iterations=1000)
    dns.reset_history()

    report("[Benchmark 1] Valid emails, three lookups each (10,000 iterations)",
           benchmark(verifier, VALID_EMAILS))
    dns.reset_history()

    report("[Benchmark 2] Invalid emails, format check only (10,000 iterations)",
           benchmark(verifier, INVALID_EMAILS))
    dns.reset_history()

    result = benchmark(verifier, ALL_EMAILS)
    report("[Benchmark 3] Mixed emails (10,000 iterations)", result)

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    print(f"Upper bound for the Flask API: ~{result['rps'] * 0.1:,.0f} - {result['rps'] * 0.3:,.0f}")
    print("(Real DNS lookups dominate once the mock is replaced)")
    print("=" * 60)


if __name__ == "__main__":
    main()
