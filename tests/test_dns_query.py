"""Test DNSBL queries and the timeout retry policy."""

import dns.exception
import dns.flags
import dns.message
import dns.rdatatype
import dns.rrset
import pytest

from zetascan.dns_query import build_query, extract_addresses, query_dns
from zetascan.errors import TransportFailure


class FlakyExchange:
    """Exchange stub failing a fixed number of times before answering."""

    def __init__(self, failures: int = 0, error: Exception = None, answers=("127.0.0.2",)):
        self.failures = failures
        self.error = error or dns.exception.Timeout()
        self.answers = answers
        self.calls = []

    def __call__(self, query, where, timeout=None, port=53):
        self.calls.append((where, port, timeout))

        if len(self.calls) <= self.failures:
            raise self.error

        response = dns.message.make_response(query)
        name = query.question[0].name
        for address in self.answers:
            response.answer.append(dns.rrset.from_text(name, 300, "IN", "A", address))
        return response


class TestBuildQuery:
    """Test outgoing questions."""

    def test_recursive_a_query(self):
        query = build_query("baddomain.org")

        assert query.flags & dns.flags.RD
        assert query.question[0].rdtype == dns.rdatatype.A
        assert query.question[0].name.to_text() == "baddomain.org."

    def test_record_type(self):
        assert build_query("x.org", "TXT").question[0].rdtype == dns.rdatatype.TXT


class TestExtractAddresses:
    """Test answer section parsing."""

    def test_only_address_records(self):
        query = build_query("x.org")
        response = dns.message.make_response(query)
        response.answer.append(dns.rrset.from_text("x.org.", 60, "IN", "A", "127.0.0.2", "127.8.0.1"))
        response.answer.append(dns.rrset.from_text("x.org.", 60, "IN", "TXT", '"listed"'))

        assert extract_addresses(response) == ["127.0.0.2", "127.8.0.1"]


class TestRetryPolicy:
    """Test bounded retries on timeout."""

    def test_success_first_attempt(self):
        exchange = FlakyExchange()

        assert query_dns("baddomain.org", "192.0.2.53", exchange=exchange) == ["127.0.0.2"]
        assert len(exchange.calls) == 1

    def test_two_timeouts_then_success(self):
        """Test two timeouts are absorbed by a budget of three attempts."""
        exchange = FlakyExchange(failures=2)

        addresses = query_dns("baddomain.org", "192.0.2.53", attempts=3, exchange=exchange)

        assert addresses == ["127.0.0.2"]
        assert len(exchange.calls) == 3

    def test_budget_exhausted(self):
        """Test a budget of one attempt surfaces the timeout."""
        exchange = FlakyExchange(failures=2)

        with pytest.raises(TransportFailure, match="timed out"):
            query_dns("baddomain.org", "192.0.2.53", attempts=1, exchange=exchange)

        assert len(exchange.calls) == 1

    def test_every_attempt_times_out(self):
        exchange = FlakyExchange(failures=10)

        with pytest.raises(TransportFailure):
            query_dns("baddomain.org", "192.0.2.53", attempts=3, exchange=exchange)

        assert len(exchange.calls) == 3

    @pytest.mark.parametrize("error", [
        OSError("Network is unreachable"),
        dns.exception.FormError("bad response"),
    ])
    def test_other_failures_not_retried(self, error):
        """Test non-timeout failures end the lookup immediately."""
        exchange = FlakyExchange(failures=1, error=error)

        with pytest.raises(TransportFailure):
            query_dns("baddomain.org", "192.0.2.53", attempts=3, exchange=exchange)

        assert len(exchange.calls) == 1

    def test_server_port_and_timeout_passed(self):
        exchange = FlakyExchange()

        query_dns("x.org", "192.0.2.53", port=5353, timeout=1.5, exchange=exchange)

        assert exchange.calls == [("192.0.2.53", 5353, 1.5)]

    def test_invalid_budget(self):
        with pytest.raises(ValueError):
            query_dns("x.org", "192.0.2.53", attempts=0, exchange=FlakyExchange())

    @pytest.mark.parametrize("name", [
        "a" * 64 + ".org",
        ".".join(["abcdefgh"] * 40) + ".org",
    ])
    def test_unqueryable_name(self, name):
        """Test a name too long for DNS fails without reaching the server."""
        exchange = FlakyExchange()

        with pytest.raises(TransportFailure, match="Invalid DNS question"):
            query_dns(name, "192.0.2.53", exchange=exchange)

        assert exchange.calls == []
