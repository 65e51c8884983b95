"""
Test suite for amortization module

Tests monthly payment calculation, amortization schedule generation, and the
rounding policy both depend on. All financial math must be exact.
"""

import pytest
from decimal import Decimal

from loan_accounts.amortization import (
    LoanTerms, PaymentResult, ScheduleEntry, RATE_SCALE,
    calculate_annual_rate, calculate_monthly_rate,
    calculate_monthly_payment, generate_schedule
)


# (principal, annual rate %, term months) -> monthly payment
KNOWN_PAYMENTS = [
    (Decimal('200000.00'), Decimal('6.0'), 360, Decimal('1199.10')),   # 30-year mortgage
    (Decimal('25000.00'), Decimal('5.0'), 60, Decimal('471.78')),      # 5-year car loan
    (Decimal('12000.00'), Decimal('0.0'), 12, Decimal('1000.00')),     # zero interest
    (Decimal('10000.00'), Decimal('12.0'), 24, Decimal('470.73')),     # short high-interest
    (Decimal('300000.00'), Decimal('3.5'), 180, Decimal('2144.65')),   # 15-year mortgage
]


class TestRateConversion:
    """Test percentage to periodic rate conversion"""

    def test_annual_rate_from_percent(self):
        """Test percentage is divided by 100 at fixed scale"""
        rate = calculate_annual_rate(Decimal('6.0'))
        assert rate == Decimal('0.06')
        assert rate.as_tuple().exponent == -RATE_SCALE

    def test_monthly_rate_rounds_half_up_at_ten_digits(self):
        """Test monthly rate keeps exactly ten fractional digits"""
        assert calculate_monthly_rate(Decimal('6.0')) == Decimal('0.0050000000')
        assert calculate_monthly_rate(Decimal('5.0')) == Decimal('0.0041666667')
        assert calculate_monthly_rate(Decimal('3.5')) == Decimal('0.0029166667')
        assert calculate_monthly_rate(Decimal('12.0')) == Decimal('0.0100000000')

    def test_monthly_rate_accepts_plain_numbers(self):
        """Test int, float and string rates convert without float error"""
        assert calculate_monthly_rate(6) == Decimal('0.005')
        assert calculate_monthly_rate(6.0) == Decimal('0.005')
        assert calculate_monthly_rate("6.0") == Decimal('0.005')


class TestMonthlyPayment:
    """Test fixed monthly payment calculation"""

    @pytest.mark.parametrize("principal,rate,term,expected", KNOWN_PAYMENTS)
    def test_known_payments(self, principal, rate, term, expected):
        """Test payments against well-known amortization results"""
        payment = calculate_monthly_payment(principal, rate, term)
        assert payment == expected
        assert payment.as_tuple().exponent == -2

    def test_zero_interest_is_straight_line(self):
        """Test zero rate divides principal evenly over the term"""
        assert calculate_monthly_payment(Decimal('1000.00'), Decimal('0'), 3) == Decimal('333.33')
        assert calculate_monthly_payment(Decimal('2000.00'), Decimal('0'), 3) == Decimal('666.67')

    def test_zero_interest_rounds_half_up(self):
        """Test ties round away from zero, not to even"""
        # 0.05 / 2 = 0.025 -> 0.03 (banker's rounding would give 0.02)
        assert calculate_monthly_payment(Decimal('0.05'), Decimal('0'), 2) == Decimal('0.03')

    def test_rate_below_resolution_is_zero_interest(self):
        """Test rates that round to zero at ten digits amortize straight-line"""
        # 0.000000004% -> 0.00000000004, rounds to zero annual rate
        assert calculate_monthly_payment(Decimal('1200.00'), Decimal('0.000000004'), 12) == Decimal('100.00')
        # 0.00000001% -> non-zero annual rate, but the monthly rate rounds to zero
        assert calculate_monthly_payment(Decimal('1200.00'), Decimal('0.00000001'), 12) == Decimal('100.00')

    def test_single_month_term(self):
        """Test one-month loan repays principal plus one month of interest"""
        assert calculate_monthly_payment(Decimal('1000.00'), Decimal('12.0'), 1) == Decimal('1010.00')

    def test_zero_principal(self):
        """Test zero principal gives zero payment"""
        assert calculate_monthly_payment(Decimal('0'), Decimal('6.0'), 360) == Decimal('0')

    @pytest.mark.parametrize("principal,rate,term", [
        (None, Decimal('6.0'), 360),
        (Decimal('200000.00'), None, 360),
        (Decimal('200000.00'), Decimal('6.0'), None),
        (None, None, None),
    ])
    def test_missing_input_returns_zero(self, principal, rate, term):
        """Test missing data short-circuits to a zero payment"""
        payment = calculate_monthly_payment(principal, rate, term)
        assert payment == Decimal('0')
        assert str(payment) == '0.00'

    def test_float_inputs(self):
        """Test float inputs are converted through their string form"""
        assert calculate_monthly_payment(200000.0, 6.0, 360) == Decimal('1199.10')

    def test_idempotent(self):
        """Test identical inputs give identical results"""
        first = calculate_monthly_payment(Decimal('300000.00'), Decimal('3.5'), 180)
        second = calculate_monthly_payment(Decimal('300000.00'), Decimal('3.5'), 180)
        assert first == second
        assert str(first) == str(second)


class TestLoanTerms:
    """Test loan terms value object"""

    def test_calculate_payment(self):
        """Test terms produce a payment result"""
        terms = LoanTerms(Decimal('200000.00'), Decimal('6.0'), 360)
        result = terms.calculate_payment()

        assert isinstance(result, PaymentResult)
        assert result.monthly_payment == Decimal('1199.10')

    def test_incomplete_terms(self):
        """Test missing fields are allowed and give a zero payment"""
        terms = LoanTerms(principal=Decimal('1000.00'))

        assert not terms.is_complete
        assert terms.calculate_payment().monthly_payment == Decimal('0.00')

    def test_terms_are_immutable(self):
        """Test terms cannot be changed after creation"""
        terms = LoanTerms(Decimal('1000.00'), Decimal('5.0'), 12)
        with pytest.raises(AttributeError):
            terms.principal = Decimal('2000.00')

    def test_numbers_converted_to_decimal(self):
        """Test plain numbers are stored as Decimal"""
        terms = LoanTerms(25000, "5.0", 60)

        assert terms.principal == Decimal('25000')
        assert terms.annual_rate_percent == Decimal('5.0')
        assert terms.is_complete

    def test_generate_schedule_uses_calculated_payment(self):
        """Test schedule defaults to the calculated monthly payment"""
        terms = LoanTerms(Decimal('10000.00'), Decimal('12.0'), 24)
        schedule = terms.generate_schedule()

        assert len(schedule) == 24
        assert schedule[0].payment == Decimal('470.73')
        assert schedule[-1].remaining_balance == Decimal('0.00')


class TestScheduleGeneration:
    """Test month-by-month amortization schedule"""

    def test_three_month_schedule(self):
        """Test every entry of a short schedule"""
        # r = 1%, payment = 340.02
        schedule = generate_schedule(Decimal('1000.00'), Decimal('12.0'), 3, Decimal('340.02'))

        assert schedule == [
            ScheduleEntry(1, Decimal('340.02'), Decimal('330.02'), Decimal('10.00'), Decimal('669.98')),
            ScheduleEntry(2, Decimal('340.02'), Decimal('333.32'), Decimal('6.70'), Decimal('336.66')),
            # Final month pays off the remaining balance; rounding drift lands here
            ScheduleEntry(3, Decimal('340.03'), Decimal('336.66'), Decimal('3.37'), Decimal('0.00')),
        ]

    def test_first_month_of_mortgage(self):
        """Test interest and principal split in the first month"""
        schedule = generate_schedule(Decimal('200000.00'), Decimal('6.0'), 360, Decimal('1199.10'))
        first = schedule[0]

        assert first.month == 1
        assert first.payment == Decimal('1199.10')
        assert first.interest_portion == Decimal('1000.00')
        assert first.principal_portion == Decimal('199.10')
        assert first.remaining_balance == Decimal('199800.90')

    @pytest.mark.parametrize("principal,rate,term,payment", KNOWN_PAYMENTS)
    def test_schedule_invariants(self, principal, rate, term, payment):
        """Test length, closing balance and monotone balance"""
        schedule = generate_schedule(principal, rate, term, payment)

        assert len(schedule) == term
        assert [entry.month for entry in schedule] == list(range(1, term + 1))
        assert schedule[-1].remaining_balance == Decimal('0.00')

        previous = principal
        for entry in schedule:
            assert entry.remaining_balance >= Decimal('0')
            assert entry.remaining_balance <= previous
            previous = entry.remaining_balance

    @pytest.mark.parametrize("principal,rate,term,payment", KNOWN_PAYMENTS)
    def test_entries_balance(self, principal, rate, term, payment):
        """Test payments split exactly and principal portions retire the loan"""
        schedule = generate_schedule(principal, rate, term, payment)

        for entry in schedule:
            assert entry.payment == entry.principal_portion + entry.interest_portion
        for entry in schedule[:-1]:
            assert entry.payment == payment

        assert sum(entry.principal_portion for entry in schedule) == principal

    def test_zero_interest_schedule(self):
        """Test zero-rate schedule charges no interest"""
        schedule = generate_schedule(Decimal('1000.00'), Decimal('0'), 3, Decimal('333.33'))

        assert all(entry.interest_portion == Decimal('0.00') for entry in schedule)
        assert [entry.remaining_balance for entry in schedule] == [
            Decimal('666.67'), Decimal('333.34'), Decimal('0.00')
        ]
        assert schedule[-1].payment == Decimal('333.34')

    def test_overpayment_clamps_balance_to_zero(self):
        """Test a payment larger than the balance never leaves a negative balance"""
        schedule = generate_schedule(Decimal('1000.00'), Decimal('0'), 3, Decimal('600.00'))

        assert [entry.remaining_balance for entry in schedule] == [
            Decimal('400.00'), Decimal('0.00'), Decimal('0.00')
        ]
        # Nothing left to retire in the final month
        assert schedule[-1].payment == Decimal('0.00')

    def test_all_amounts_have_two_decimals(self):
        """Test every amount is rounded to cents"""
        schedule = generate_schedule(Decimal('25000'), Decimal('5'), 60, Decimal('471.78'))

        for entry in schedule:
            for amount in (entry.payment, entry.principal_portion,
                           entry.interest_portion, entry.remaining_balance):
                assert amount.as_tuple().exponent == -2

    def test_generation_is_repeatable(self):
        """Test each call recomputes an identical schedule"""
        first = generate_schedule(Decimal('300000.00'), Decimal('3.5'), 180, Decimal('2144.65'))
        second = generate_schedule(Decimal('300000.00'), Decimal('3.5'), 180, Decimal('2144.65'))

        assert first == second
        assert first is not second


class TestScheduleEntry:
    """Test schedule entry serialization"""

    def test_to_dict(self):
        """Test wire keys and two-decimal string amounts"""
        entry = ScheduleEntry(
            month=3,
            payment=Decimal('340.03'),
            principal_portion=Decimal('336.66'),
            interest_portion=Decimal('3.37'),
            remaining_balance=Decimal('0')
        )

        assert entry.to_dict() == {
            "month": 3,
            "payment": "340.03",
            "principal": "336.66",
            "interest": "3.37",
            "remainingBalance": "0.00",
        }
