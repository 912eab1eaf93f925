"""Tests for watercycle.hydrology.deposits — double-buffered inputs."""

from watercycle.hydrology.deposits import Deposit, DepositField, DepositKind


class TestDepositField:
    def test_initially_empty(self) -> None:
        field = DepositField(width=4, height=3)
        assert field.take(2, 1) == Deposit()
        for layer in field.incoming.values():
            assert layer.shape == (3, 4)

    def test_writes_invisible_until_swap(self) -> None:
        field = DepositField(width=4, height=4)
        field.deposit(DepositKind.RUNOFF, 1, 2, 2.0)
        assert field.take(1, 2).runoff == 0.0
        field.swap()
        assert field.take(1, 2).runoff == 2.0

    def test_take_clears(self) -> None:
        field = DepositField(width=4, height=4)
        field.deposit(DepositKind.SEDIMENT, 0, 0, 1.5)
        field.swap()
        assert field.take(0, 0).sediment == 1.5
        assert field.take(0, 0) == Deposit()

    def test_deposits_accumulate(self) -> None:
        field = DepositField(width=2, height=2)
        field.deposit(DepositKind.PRECIPITATION, 1, 1, 0.25)
        field.deposit(DepositKind.PRECIPITATION, 1, 1, 0.5)
        field.deposit(DepositKind.RUNOFF, 1, 1, 3.0)
        assert field.outgoing[DepositKind.PRECIPITATION].sum() == 0.75
        field.swap()
        assert field.peek(1, 1) == Deposit(precipitation=0.75, runoff=3.0)

    def test_unread_inputs_discarded_on_swap(self) -> None:
        field = DepositField(width=2, height=2)
        field.deposit(DepositKind.RUNOFF, 0, 1, 1.0)
        field.swap()
        field.swap()
        assert field.take(0, 1) == Deposit()
        assert field.outgoing[DepositKind.RUNOFF].sum() == 0.0
