"""
Locust Load Testing File for Email Verifier API

Run with:
    locust -f locustfile.py --host=http://localhost:8080

Then open http://localhost:8089 in your browser to control the test.
"""

import random
from locust import HttpUser, task, between, events
from locust.runners import MasterRunner, WorkerRunner


VALID_EMAILS = [
    "user@example.com",
    "john.doe@company.org",
    "alice123@gmail.com",
    "bob_smith@yahoo.com",
    "charlie.brown@outlook.com",
    "david+tag@proton.me",
    "grace@university.edu",
]

INVALID_EMAILS = [
    "plainaddress",
    "@missing-local.com",
    "missing-domain@",
    "user@domain",
    "user@@double-at.com",
    "user space@domain.com",
    "user@domain.c",
]

MIXED_EMAILS = VALID_EMAILS + INVALID_EMAILS


class EmailVerifierUser(HttpUser):
    """
    Simulates a client of the Email Verifier API.
    """

    wait_time = between(0.5, 2)

    @task(10)
    def verify_valid_email(self):
        """Verify a well-formed address, which triggers three DNS lookups."""
        self.client.post(
            "/verify",
            json={"email": random.choice(VALID_EMAILS)},
            name="/verify [valid]"
        )

    @task(3)
    def verify_invalid_email(self):
        """Verify a malformed address, answered without DNS."""
        self.client.post(
            "/verify",
            json={"email": random.choice(INVALID_EMAILS)},
            name="/verify [invalid]"
        )

    @task(1)
    def verify_bad_request(self):
        """Send a request that must be rejected with 400."""
        with self.client.post("/verify", json={}, name="/verify [400]",
                              catch_response=True) as response:
            if response.status_code == 400:
                response.success()
            else:
                response.failure(f"expected 400, got {response.status_code}")

    @task(1)
    def health_check(self):
        self.client.get("/health", name="/health")


class StressTestUser(HttpUser):
    """
    Stress test user with minimal wait time.
    Used to test maximum throughput.
    """

    wait_time = between(0.01, 0.1)

    @task
    def rapid_verification(self):
        self.client.post(
            "/verify",
            json={"email": random.choice(MIXED_EMAILS)}
        )


@events.request.add_listener
def on_request(request_type, name, response_time, response_length, exception, **kwargs):
    """Log failed and slow requests."""
    if exception:
        print(f"Request failed: {name} - {exception}")
    elif response_time > 1000:
        print(f"Slow request: {name} took {response_time:.2f}ms")


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("=" * 50)
    print("Email Verifier Load Test Starting")
    print("=" * 50)
    if isinstance(environment.runner, MasterRunner):
        print("Running in distributed mode (master)")
    elif isinstance(environment.runner, WorkerRunner):
        print("Running in distributed mode (worker)")
    else:
        print("Running in standalone mode")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Print summary statistics."""
    print("=" * 50)
    print("Email Verifier Load Test Complete")
    print("=" * 50)

    stats = environment.stats
    print(f"\nTotal Requests: {stats.total.num_requests}")
    print(f"Total Failures: {stats.total.num_failures}")
    print(f"Average Response Time: {stats.total.avg_response_time:.2f}ms")
    print(f"Median Response Time: {stats.total.median_response_time:.2f}ms")
    print(f"95th Percentile: {stats.total.get_response_time_percentile(0.95):.2f}ms")
    print(f"Requests/sec: {stats.total.total_rps:.2f}")
