"""
Unit tests for BigInt.

Tests:
- Construction and radix parsing/printing
- Add/subtract/multiply with mixed signs
- Truncating division and non-negative mod
- Modular exponentiation and inverse
- Two's-complement byte conversion
- Primality testing and prime generation
"""

import pickle
import random

import pytest

from purecrypt.core_crypto.bigint import BigInt, SMALL_PRIMES
from purecrypt.errors import DivisionByZero, NonPositiveModulus, NotInvertible


# Values chosen to cross limb boundaries in both directions
SAMPLES = [
    0, 1, -1, 2, 255, 256, -128, -129, 0xFFFFFFFF, 0x100000000, -0x100000000,
    0xFFFFFFFFFFFFFFFF, 2 ** 95 - 1, -(2 ** 127), 3 ** 80, -(7 ** 50),
    123456789012345678901234567890,
]


def _trunc_divmod(a: int, b: int):
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - q * b


class TestConstruction:
    """Building BigInts and reading them back."""

    def test_from_int_round_trip(self):
        """int -> BigInt -> int is lossless."""
        for value in SAMPLES:
            assert int(BigInt(value)) == value

    def test_zero_is_canonical(self):
        """Zero has sign 0 and no limbs, however it was produced."""
        for zero in (BigInt(0), BigInt("-0"), BigInt(5) - BigInt(5), BigInt.from_bytes(b"")):
            assert zero.signum == 0
            assert zero.limbs == ()
            assert zero == BigInt.ZERO

    def test_no_trailing_zero_limbs(self):
        """Subtraction that cancels high limbs trims them."""
        value = BigInt(2 ** 64 + 5) - BigInt(2 ** 64)
        assert value.limbs == (5,)

    def test_decimal_string(self):
        """Decimal parsing and printing."""
        text = "-123456789012345678901234567890123456789"
        assert BigInt.from_decimal_string(text).to_decimal_string() == text

    def test_radix_strings(self):
        """Parsing and printing agree with Python for several radixes."""
        for radix in (2, 8, 16, 36):
            for value in SAMPLES:
                big = BigInt(value)
                text = big.to_string(radix)
                assert int(text, radix) == value
                assert BigInt.from_radix_string(text, radix) == big

    def test_radix_accepts_uppercase(self):
        """Digits above 9 are case-insensitive."""
        assert BigInt.from_radix_string("FF", 16) == 255

    def test_invalid_digit_rejected(self):
        """A digit outside the radix is an error."""
        with pytest.raises(ValueError):
            BigInt.from_radix_string("12a", 10)

    def test_empty_string_rejected(self):
        """Empty and sign-only strings have no digits."""
        for text in ("", "-", "+"):
            with pytest.raises(ValueError):
                BigInt.from_decimal_string(text)

    def test_bad_radix_rejected(self):
        """Radix must be 2..36."""
        with pytest.raises(ValueError):
            BigInt.from_radix_string("1", 37)

    def test_immutable(self):
        """Attributes cannot be reassigned."""
        value = BigInt(5)
        with pytest.raises(AttributeError):
            value._sign = -1

    def test_pickle(self):
        """Pickling round-trips."""
        value = BigInt(-(3 ** 70))
        assert pickle.loads(pickle.dumps(value)) == value

    def test_repr(self):
        assert repr(BigInt(445)) == "BigInt('445')"


class TestArithmetic:
    """Add, subtract, multiply, divide."""

    def test_add_subtract_multiply_match_python(self):
        """Results agree with Python ints across sign combinations."""
        for a in SAMPLES:
            for b in SAMPLES:
                x, y = BigInt(a), BigInt(b)
                assert int(x.add(y)) == a + b
                assert int(x.subtract(y)) == a - b
                assert int(x.multiply(y)) == a * b

    def test_truncating_division(self):
        """Quotient rounds toward zero, remainder follows the dividend."""
        for a in SAMPLES:
            for b in SAMPLES:
                if b == 0:
                    continue
                q, r = BigInt(a).divide_and_remainder(BigInt(b))
                assert (int(q), int(r)) == _trunc_divmod(a, b)

    def test_remainder_sign(self):
        """-7 rem 3 is -1, unlike Python's %."""
        assert BigInt(-7).remainder(BigInt(3)) == -1
        assert BigInt(7).remainder(BigInt(-3)) == 1

    def test_mod_is_non_negative(self):
        """mod() always lands in [0, m)."""
        assert BigInt(-7).mod(BigInt(3)) == 2
        for a in SAMPLES:
            assert int(BigInt(a).mod(BigInt(97))) == a % 97

    def test_division_randomized(self):
        """Multi-limb divisors exercise the normalisation and correction steps."""
        rng = random.Random(1234)
        for _ in range(200):
            a = rng.getrandbits(rng.randint(1, 600)) * rng.choice((1, -1))
            b = rng.getrandbits(rng.randint(1, 300)) or 1
            q, r = BigInt(a).divide_and_remainder(BigInt(b))
            assert (int(q), int(r)) == _trunc_divmod(a, b)

    def test_divide_by_zero(self):
        """Division, remainder and mod by zero raise DivisionByZero."""
        with pytest.raises(DivisionByZero):
            BigInt(10).divide(BigInt.ZERO)
        with pytest.raises(DivisionByZero):
            BigInt(10).remainder(BigInt.ZERO)
        with pytest.raises(DivisionByZero):
            BigInt(10).mod(BigInt.ZERO)

    def test_divide_by_zero_is_zero_division_error(self):
        """Callers can catch the built-in exception."""
        with pytest.raises(ZeroDivisionError):
            BigInt(1).divide(BigInt(0))

    def test_mod_negative_modulus(self):
        with pytest.raises(NonPositiveModulus):
            BigInt(10).mod(BigInt(-3))

    def test_zero_operands(self):
        """Multiplying by or dividing zero does not fail."""
        assert BigInt(0).multiply(BigInt(12345)) == 0
        assert BigInt(0).divide(BigInt(7)) == 0

    def test_shifts(self):
        """Shifts agree with Python, including floor semantics for negatives."""
        for value in SAMPLES:
            for n in (0, 1, 31, 32, 33, 70):
                assert int(BigInt(value).shift_left(n)) == value << n
                assert int(BigInt(value).shift_right(n)) == value >> n

    def test_operators(self):
        """Operator overloads accept ints on either side."""
        x = BigInt(10)
        assert x + 5 == 15
        assert 5 + x == 15
        assert x - 20 == -10
        assert 3 * x == 30
        assert x % 3 == 1
        assert -x == -10
        assert abs(BigInt(-4)) == 4
        assert x << 2 == 40
        assert not BigInt(0)

    def test_comparison(self):
        """Ordering is by sign, then magnitude."""
        ordered = sorted(SAMPLES)
        assert sorted(BigInt(v) for v in SAMPLES) == [BigInt(v) for v in ordered]
        assert BigInt(-5).compare_to(BigInt(3)) == -1
        assert BigInt(2 ** 40).compare_to(BigInt(2 ** 39)) == 1
        assert BigInt(7).compare_to(BigInt(7)) == 0

    def test_hash_matches_int(self):
        """Equal values hash equally, including against ints."""
        assert hash(BigInt(2 ** 70)) == hash(2 ** 70)
        assert len({BigInt(3), BigInt(3), BigInt(-3)}) == 2

    def test_gcd(self):
        assert BigInt(462).gcd(BigInt(-1071)) == 21

    def test_bit_length(self):
        """bit_length of the magnitude; zero has none."""
        assert BigInt(0).bit_length() == 0
        assert BigInt(1).bit_length() == 1
        assert BigInt(2 ** 32).bit_length() == 33
        assert BigInt(-255).bit_length() == 8

    def test_test_bit(self):
        value = BigInt(0b1010)
        assert value.test_bit(1)
        assert not value.test_bit(2)
        assert not value.test_bit(500)


class TestModularArithmetic:
    """mod_pow and mod_inverse."""

    def test_textbook_vector(self):
        """4^13 mod 497 == 445."""
        assert BigInt(4).mod_pow(BigInt(13), BigInt(497)) == BigInt(445)

    def test_mod_pow_matches_python(self):
        """Odd (Montgomery) and even moduli both agree with pow()."""
        rng = random.Random(99)
        for _ in range(40):
            base = rng.getrandbits(300)
            exp = rng.getrandbits(200)
            modulus = rng.getrandbits(256) | 1
            assert int(BigInt(base).mod_pow(BigInt(exp), BigInt(modulus))) == pow(base, exp, modulus)
            even = modulus + 1
            assert int(BigInt(base).mod_pow(BigInt(exp), BigInt(even))) == pow(base, exp, even)

    def test_mod_pow_negative_base(self):
        """A negative base is reduced to its non-negative residue first."""
        assert int(BigInt(-3).mod_pow(BigInt(3), BigInt(11))) == pow(-3, 3, 11)

    def test_mod_pow_edge_cases(self):
        """Zero exponent, modulus one and zero base."""
        assert BigInt(5).mod_pow(BigInt(0), BigInt(7)) == 1
        assert BigInt(5).mod_pow(BigInt(3), BigInt(1)) == 0
        assert BigInt(0).mod_pow(BigInt(3), BigInt(7)) == 0

    def test_mod_pow_non_positive_modulus(self):
        """modulus <= 0 is an arithmetic error."""
        with pytest.raises(NonPositiveModulus):
            BigInt(2).mod_pow(BigInt(3), BigInt(0))
        with pytest.raises(ArithmeticError):
            BigInt(2).mod_pow(BigInt(3), BigInt(-5))

    def test_mod_pow_negative_exponent(self):
        """A negative exponent uses the modular inverse."""
        assert int(BigInt(3).mod_pow(BigInt(-1), BigInt(11))) == pow(3, -1, 11)
        with pytest.raises(NotInvertible):
            BigInt(4).mod_pow(BigInt(-1), BigInt(8))

    def test_mod_inverse(self):
        inverse = BigInt(17).mod_inverse(BigInt(43))
        assert inverse is not None
        assert BigInt(17).multiply(inverse).mod(BigInt(43)) == 1

    def test_mod_inverse_missing(self):
        """No inverse when gcd != 1."""
        assert BigInt(6).mod_inverse(BigInt(9)) is None

    def test_mod_inverse_large(self):
        e = BigInt(65537)
        phi = BigInt(2 ** 256)
        d = e.mod_inverse(phi)
        assert int(d) == pow(65537, -1, 2 ** 256)


class TestByteConversion:
    """Two's-complement big-endian bytes."""

    def test_known_encodings(self):
        """A sign byte is added only when the top bit would mislead."""
        cases = {
            0: "00",
            1: "01",
            127: "7f",
            128: "0080",
            255: "00ff",
            256: "0100",
            -1: "ff",
            -128: "80",
            -129: "ff7f",
            -256: "ff00",
        }
        for value, expected in cases.items():
            assert BigInt(value).to_bytes().hex() == expected

    def test_matches_python_signed(self):
        """Encoding matches int.to_bytes(signed=True) at minimal length."""
        for value in SAMPLES:
            length = max(1, (value.bit_length() + 8) // 8)
            expected = value.to_bytes(length, "big", signed=True)
            # Python's minimal length can include one redundant sign byte
            while len(expected) > 1 and (
                (expected[0] == 0 and expected[1] < 0x80) or
                (expected[0] == 0xFF and expected[1] >= 0x80)
            ):
                expected = expected[1:]
            assert BigInt(value).to_bytes() == expected

    def test_round_trip_random_bytes(self):
        """from_bytes(to_bytes(from_bytes(b))) == from_bytes(b)."""
        rng = random.Random(7)
        for _ in range(200):
            data = bytes(rng.getrandbits(8) for _ in range(rng.randint(1, 40)))
            value = BigInt.from_bytes(data)
            assert BigInt.from_bytes(value.to_bytes()) == value
            assert int(value) == int.from_bytes(data, "big", signed=True)

    def test_unsigned_bytes(self):
        """Unsigned conversion pads to a fixed width."""
        assert BigInt.from_unsigned_bytes(b"\xff\x00") == 0xFF00
        assert BigInt(0xFF00).to_unsigned_bytes(4) == b"\x00\x00\xff\x00"
        assert BigInt(0).to_unsigned_bytes() == b"\x00"

    def test_unsigned_bytes_too_long(self):
        with pytest.raises(ValueError):
            BigInt(2 ** 40).to_unsigned_bytes(4)

    def test_unsigned_bytes_negative(self):
        with pytest.raises(ValueError):
            BigInt(-1).to_unsigned_bytes()


class TestPrimality:
    """Miller-Rabin and prime generation."""

    def test_small_primes_and_composites(self):
        primes = [2, 3, 5, 7, 11, 13, 97, 101, 1009, 104729]
        composites = [0, 1, 4, 6, 9, 15, 21, 100, 1000, 104730, 561, 1105]
        for p in primes:
            assert BigInt(p).is_probable_prime()
        for c in composites:
            assert not BigInt(c).is_probable_prime()

    def test_negative_is_not_prime(self):
        assert not BigInt(-7).is_probable_prime()

    def test_large_known_prime(self):
        """2^127 - 1 is a Mersenne prime."""
        assert BigInt(2 ** 127 - 1).is_probable_prime()

    def test_large_known_composite(self):
        """Product of two large primes is rejected."""
        assert not BigInt((2 ** 61 - 1) * (2 ** 89 - 1)).is_probable_prime()

    def test_carmichael_number(self):
        """Carmichael numbers fool Fermat but not Miller-Rabin."""
        # 6763 * 10627 * 29947, no factor below 1024
        carmichael = 2152302898747
        assert not BigInt(carmichael).is_probable_prime()

    def test_small_prime_table(self):
        assert SMALL_PRIMES[:5] == (2, 3, 5, 7, 11)
        assert SMALL_PRIMES[-1] < 1024

    @pytest.mark.parametrize("bits", [2, 16, 64, 128])
    def test_probable_prime_bit_length(self, bits):
        """Generated primes are odd with the top bit set."""
        prime = BigInt.probable_prime(bits)
        assert prime.bit_length() == bits
        assert prime >= BigInt.ONE.shift_left(bits - 1)
        assert prime.is_probable_prime()
        assert prime.is_odd()

    def test_probable_prime_rejects_tiny(self):
        with pytest.raises(ValueError):
            BigInt.probable_prime(1)
