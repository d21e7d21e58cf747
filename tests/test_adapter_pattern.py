import unittest
from typing import Protocol
from unittest.mock import MagicMock

from scopebind import Container


class Contains:  # noqa: PLW1641
    def __init__(self, substring):
        self.substring = substring

    def __repr__(self):
        return f"Contains({self.substring!r})"

    def __eq__(self, other):
        return isinstance(other, str) and self.substring in other


class PaymentClient(Protocol):
    def charge(self, order_id: str, amount_cents: int) -> None: ...


class InfoLogger(Protocol):
    def info(self, msg: object, *args: object) -> None: ...


class NullLogger:
    def info(self, msg: object, *args: object) -> None:
        pass


class StripeSdk:
    def pay(self, amount_usd: float, reference: str) -> bool:
        return True


class StripeAdapter:
    def __init__(self, sdk: StripeSdk, logger: InfoLogger, usd_per_cent: float = 0.01) -> None:
        self._logger = logger
        self._sdk = sdk
        self._usd_per_cent = usd_per_cent

    def charge(self, order_id: str, amount_cents: int) -> None:
        self._logger.info("adapting to stripe sdk api")
        amount_usd = amount_cents * self._usd_per_cent
        ok = self._sdk.pay(amount_usd, reference=order_id)
        if not ok:
            msg = "Stripe payment failed"
            raise RuntimeError(msg)


class TestWiringAdapterThirdPartySDK(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.cont.register_for(PaymentClient, StripeAdapter)
        self.cont.register_self(StripeSdk)
        self.cont.register_for(InfoLogger, NullLogger)

    def test_adapter_calls_substituted_adaptee(self):
        stripe_sdk = StripeSdk()
        stripe_sdk.pay = MagicMock(wraps=stripe_sdk.pay)
        self.cont.replace_with(StripeSdk, instance=stripe_sdk)
        logger = NullLogger()
        logger.info = MagicMock(wraps=logger.info)
        self.cont.replace_with(InfoLogger, instance=logger)

        client: PaymentClient = self.cont.inject(PaymentClient)
        client.charge("order-123", 5000)

        assert stripe_sdk.pay.call_count == 1
        assert stripe_sdk.pay.call_args[0][0] == 0.01 * 5000
        assert stripe_sdk.pay.call_args[1]["reference"] == "order-123"
        assert logger.info.call_args[0][0] == Contains("stripe sdk")

    def test_substitution_after_resolution_needs_destroy_of_dependent(self):
        client = self.cont.inject(PaymentClient)
        failing_sdk = MagicMock(spec=StripeSdk)
        failing_sdk.pay.return_value = False

        self.cont.replace_with(StripeSdk, instance=failing_sdk)
        assert self.cont.inject(PaymentClient) is client
        client.charge("order-1", 100)

        self.cont.destroy(PaymentClient)
        with self.assertRaises(RuntimeError):
            self.cont.inject(PaymentClient).charge("order-2", 100)
