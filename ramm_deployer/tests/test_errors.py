"""Unit tests for failure classification."""

import unittest

from deployment_config.validator import ConfigurationError
from ledger_client.client import ClientConstructionError, RequestFailure, SigningFailure, TransactionBuildFailure
from ledger_client.ptb import PtbError

from ramm_deployer.errors import ErrorKind, ExecutionError, ProtocolInvariantError, classify


class ClassifyTests(unittest.TestCase):
    def test_deployment_errors_keep_their_kind(self) -> None:
        self.assertEqual(classify(ExecutionError("abort", abort_reason="MoveAbort(3)")), ErrorKind.EXECUTION)
        self.assertEqual(classify(ProtocolInvariantError("shape")), ErrorKind.PROTOCOL_INVARIANT)

    def test_collaborator_failures_are_mapped(self) -> None:
        cases = (
            (ConfigurationError("bad"), ErrorKind.CONFIGURATION),
            (PtbError("slot"), ErrorKind.TRANSACTION_BUILD),
            (ClientConstructionError("env"), ErrorKind.NETWORK),
            (RequestFailure("down"), ErrorKind.NETWORK),
            (TransactionBuildFailure("build"), ErrorKind.TRANSACTION_BUILD),
            (SigningFailure("key"), ErrorKind.SIGNING),
        )
        for exc, kind in cases:
            self.assertEqual(classify(exc), kind, type(exc).__name__)

    def test_unrelated_exceptions_are_not_classified(self) -> None:
        with self.assertRaises(TypeError):
            classify(KeyError("x"))


if __name__ == "__main__":
    unittest.main()
