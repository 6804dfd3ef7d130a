"""
Arbitrary-Precision Integer Implementation (From Scratch)

A signed big integer stored as little-endian unsigned 32-bit limbs plus a
sign in {-1, 0, +1}. Python ints are only ever used as single machine
words (a limb, or the 64-bit product of two limbs); every multi-limb
algorithm is implemented here:

- Schoolbook addition, subtraction and multiplication
- Knuth Algorithm D long division (truncating toward zero)
- Square-and-multiply modular exponentiation with Montgomery reduction
  for odd moduli
- Extended Euclidean modular inverse
- Miller-Rabin primality testing and random prime generation
- Radix parsing/printing and big-endian two's-complement byte conversion

Invariants: sign == 0 exactly when the magnitude is empty, and the
magnitude never ends in a zero limb. Instances are immutable.
"""

import secrets
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import LIMB_BITS, MASK_32, MIN_MILLER_RABIN_ROUNDS, get_config
from ..errors import (
    DivisionByZero, NonPositiveModulus, NotInvertible, PrimeGenerationError
)


BASE = 1 << LIMB_BITS
DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

RandomSource = Callable[[int], bytes]


def _sieve(limit: int) -> Tuple[int, ...]:
    """Primes below limit (used once, at import time)."""
    flags = [True] * limit
    flags[0] = flags[1] = False
    for i in range(2, int(limit ** 0.5) + 1):
        if flags[i]:
            for j in range(i * i, limit, i):
                flags[j] = False
    return tuple(i for i in range(limit) if flags[i])


# Trial-division primes for cheap rejection before Miller-Rabin
SMALL_PRIMES = _sieve(1024)


# ============================================================================
# Magnitude helpers (little-endian lists of 32-bit limbs)
# ============================================================================

def _trim(mag: List[int]) -> List[int]:
    """Drop high-order zero limbs in place."""
    while mag and mag[-1] == 0:
        mag.pop()
    return mag


def _compare_mag(a: Sequence[int], b: Sequence[int]) -> int:
    """Compare two trimmed magnitudes, returns -1, 0 or 1."""
    if len(a) != len(b):
        return 1 if len(a) > len(b) else -1
    for i in range(len(a) - 1, -1, -1):
        if a[i] != b[i]:
            return 1 if a[i] > b[i] else -1
    return 0


def _add_mag(a: Sequence[int], b: Sequence[int]) -> List[int]:
    if len(a) < len(b):
        a, b = b, a
    result = []
    carry = 0
    for i in range(len(a)):
        t = a[i] + (b[i] if i < len(b) else 0) + carry
        result.append(t & MASK_32)
        carry = t >> LIMB_BITS
    if carry:
        result.append(carry)
    return result


def _sub_mag(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """a - b for magnitudes with a >= b."""
    result = []
    borrow = 0
    for i in range(len(a)):
        t = a[i] - (b[i] if i < len(b) else 0) - borrow
        if t < 0:
            t += BASE
            borrow = 1
        else:
            borrow = 0
        result.append(t)
    return _trim(result)


def _mul_mag(a: Sequence[int], b: Sequence[int]) -> List[int]:
    if not a or not b:
        return []
    result = [0] * (len(a) + len(b))
    for i, x in enumerate(a):
        if x == 0:
            continue
        carry = 0
        for j, y in enumerate(b):
            t = result[i + j] + x * y + carry
            result[i + j] = t & MASK_32
            carry = t >> LIMB_BITS
        result[i + len(b)] = carry
    return _trim(result)


def _mul_add_small(mag: List[int], factor: int, addend: int) -> List[int]:
    """mag * factor + addend for single-limb factor and addend (in place)."""
    carry = addend
    for i in range(len(mag)):
        t = mag[i] * factor + carry
        mag[i] = t & MASK_32
        carry = t >> LIMB_BITS
    if carry:
        mag.append(carry)
    return _trim(mag)


def _divmod_small(a: Sequence[int], divisor: int) -> Tuple[List[int], int]:
    """Divide a magnitude by a single non-zero limb."""
    quotient = [0] * len(a)
    remainder = 0
    for i in range(len(a) - 1, -1, -1):
        current = (remainder << LIMB_BITS) | a[i]
        quotient[i] = current // divisor
        remainder = current - quotient[i] * divisor
    return _trim(quotient), remainder


def _shift_left_mag(a: Sequence[int], n: int) -> List[int]:
    if not a:
        return []
    limbs, bits = divmod(n, LIMB_BITS)
    result = [0] * limbs
    if bits == 0:
        result.extend(a)
        return result
    carry = 0
    for limb in a:
        result.append(((limb << bits) | carry) & MASK_32)
        carry = limb >> (LIMB_BITS - bits)
    if carry:
        result.append(carry)
    return result


def _shift_right_mag(a: Sequence[int], n: int) -> List[int]:
    limbs, bits = divmod(n, LIMB_BITS)
    if limbs >= len(a):
        return []
    if bits == 0:
        return list(a[limbs:])
    result = []
    for i in range(limbs, len(a)):
        value = a[i] >> bits
        if i + 1 < len(a):
            value |= (a[i + 1] << (LIMB_BITS - bits)) & MASK_32
        result.append(value)
    return _trim(result)


def _divmod_mag(a: Sequence[int], b: Sequence[int]) -> Tuple[List[int], List[int]]:
    """
    Long division of magnitudes (Knuth, TAOCP vol. 2, Algorithm D).

    Args:
        a: Dividend magnitude
        b: Divisor magnitude (non-empty)

    Returns:
        Tuple (quotient, remainder) of magnitudes
    """
    if not b:
        raise DivisionByZero("Division by zero")
    if _compare_mag(a, b) < 0:
        return [], list(a)
    if len(b) == 1:
        q, r = _divmod_small(a, b[0])
        return q, ([r] if r else [])

    # D1: normalize so the divisor's top limb has its high bit set
    shift = LIMB_BITS - b[-1].bit_length()
    v = _shift_left_mag(b, shift)
    u = _shift_left_mag(a, shift)
    if len(u) == len(a):
        u.append(0)

    n = len(v)
    m = len(u) - n - 1
    quotient = [0] * (m + 1)
    v_top = v[-1]
    v_next = v[-2]

    for j in range(m, -1, -1):
        # D3: estimate the quotient limb from the top two limbs
        numerator = (u[j + n] << LIMB_BITS) | u[j + n - 1]
        qhat, rhat = divmod(numerator, v_top)
        while qhat >= BASE or qhat * v_next > ((rhat << LIMB_BITS) | u[j + n - 2]):
            qhat -= 1
            rhat += v_top
            if rhat >= BASE:
                break

        # D4: multiply and subtract
        borrow = 0
        carry = 0
        for i in range(n):
            product = qhat * v[i] + carry
            carry = product >> LIMB_BITS
            t = u[i + j] - (product & MASK_32) - borrow
            u[i + j] = t & MASK_32
            borrow = 1 if t < 0 else 0
        t = u[j + n] - carry - borrow
        u[j + n] = t & MASK_32

        # D6: add back when the estimate was one too large
        if t < 0:
            qhat -= 1
            carry = 0
            for i in range(n):
                s = u[i + j] + v[i] + carry
                u[i + j] = s & MASK_32
                carry = s >> LIMB_BITS
            u[j + n] = (u[j + n] + carry) & MASK_32

        quotient[j] = qhat

    # D8: unnormalize the remainder
    remainder = _shift_right_mag(_trim(u[:n]), shift)
    return _trim(quotient), remainder


def _mod_mag(a: Sequence[int], m: Sequence[int]) -> List[int]:
    return _divmod_mag(a, m)[1]


def _bytes_to_mag(data: bytes) -> List[int]:
    """Big-endian unsigned bytes to a magnitude."""
    mag = []
    end = len(data)
    while end > 0:
        start = max(0, end - 4)
        limb = 0
        for byte in data[start:end]:
            limb = (limb << 8) | byte
        mag.append(limb)
        end = start
    return _trim(mag)


def _mag_to_bytes(mag: Sequence[int]) -> bytes:
    """Magnitude to minimal big-endian unsigned bytes (empty for zero)."""
    out = bytearray()
    for limb in reversed(mag):
        out += bytes(((limb >> 24) & 0xFF, (limb >> 16) & 0xFF, (limb >> 8) & 0xFF, limb & 0xFF))
    start = 0
    while start < len(out) and out[start] == 0:
        start += 1
    return bytes(out[start:])


def _twos_complement(data: bytearray) -> bytearray:
    """Invert and add one, in place."""
    for i in range(len(data)):
        data[i] ^= 0xFF
    for i in range(len(data) - 1, -1, -1):
        data[i] = (data[i] + 1) & 0xFF
        if data[i] != 0:
            break
    return data


# ============================================================================
# Montgomery arithmetic (odd moduli)
# ============================================================================

def _limb_inverse(m0: int) -> int:
    """-m0^-1 mod 2^32 for odd m0, by Newton iteration."""
    inv = m0
    for _ in range(5):
        inv = (inv * (2 - m0 * inv)) & MASK_32
    return (BASE - inv) & MASK_32


def _pad(mag: Sequence[int], size: int) -> List[int]:
    return list(mag) + [0] * (size - len(mag))


def _mont_mul(a: List[int], b: List[int], m: List[int], m_inv: int) -> List[int]:
    """
    Montgomery product a * b * R^-1 mod m (CIOS method).

    a, b and m are padded to the same number of limbs s, R = 2^(32*s),
    and a, b < m.
    """
    s = len(m)
    t = [0] * (s + 2)
    for i in range(s):
        ai = a[i]
        carry = 0
        for j in range(s):
            x = t[j] + ai * b[j] + carry
            t[j] = x & MASK_32
            carry = x >> LIMB_BITS
        x = t[s] + carry
        t[s] = x & MASK_32
        t[s + 1] = x >> LIMB_BITS

        u = (t[0] * m_inv) & MASK_32
        x = t[0] + u * m[0]
        carry = x >> LIMB_BITS
        for j in range(1, s):
            x = t[j] + u * m[j] + carry
            t[j - 1] = x & MASK_32
            carry = x >> LIMB_BITS
        x = t[s] + carry
        t[s - 1] = x & MASK_32
        t[s] = t[s + 1] + (x >> LIMB_BITS)

    result = _trim(t[:s + 1])
    if _compare_mag(result, m) >= 0:
        result = _sub_mag(result, m)
    return _pad(result, s)


def _exponent_bits(exp: Sequence[int]):
    """Yield exponent bits from least significant to most significant."""
    for index, limb in enumerate(exp):
        width = limb.bit_length() if index == len(exp) - 1 else LIMB_BITS
        for bit in range(width):
            yield (limb >> bit) & 1


def _mont_pow(base: List[int], exp: List[int], m: List[int]) -> List[int]:
    """base^exp mod m for odd m > 1 and base < m."""
    s = len(m)
    m_inv = _limb_inverse(m[0])
    mod = _pad(m, s)
    r2 = _pad(_mod_mag(_shift_left_mag([1], 2 * LIMB_BITS * s), m), s)

    base_m = _mont_mul(_pad(base, s), r2, mod, m_inv)
    result_m = _mont_mul(_pad([1], s), r2, mod, m_inv)

    bits = list(_exponent_bits(exp))
    for position, bit in enumerate(bits):
        if bit:
            result_m = _mont_mul(result_m, base_m, mod, m_inv)
        if position + 1 < len(bits):
            base_m = _mont_mul(base_m, base_m, mod, m_inv)

    return _trim(_mont_mul(result_m, _pad([1], s), mod, m_inv))


def _plain_pow(base: List[int], exp: List[int], m: List[int]) -> List[int]:
    """base^exp mod m with a full reduction after every multiply."""
    result = _mod_mag([1], m)
    for bit in _exponent_bits(exp):
        if bit:
            result = _mod_mag(_mul_mag(result, base), m)
        base = _mod_mag(_mul_mag(base, base), m)
    return result


# ============================================================================
# BigInt
# ============================================================================

class BigInt:
    """
    Immutable arbitrary-precision signed integer.

    Example:
        >>> BigInt(4).mod_pow(BigInt(13), BigInt(497))
        BigInt('445')
        >>> BigInt.from_radix_string("ff", 16).to_bytes()
        b'\\x00\\xff'
    """

    __slots__ = ('_mag', '_sign')

    ZERO: 'BigInt'
    ONE: 'BigInt'
    TWO: 'BigInt'

    def __init__(self, value=0, radix: int = 10):
        """
        Args:
            value: A Python int, another BigInt, or a digit string in `radix`
            radix: Radix used when value is a string (2-36)
        """
        if isinstance(value, BigInt):
            mag, sign = list(value._mag), value._sign
        elif isinstance(value, str):
            mag, sign = _parse(value, radix)
        elif isinstance(value, int) and not isinstance(value, bool):
            mag, sign = _split_int(value)
        else:
            raise TypeError(f"Cannot build BigInt from {type(value).__name__}")
        self._set(mag, sign)

    def _set(self, mag: List[int], sign: int) -> None:
        _trim(mag)
        object.__setattr__(self, '_mag', tuple(mag))
        object.__setattr__(self, '_sign', sign if mag else 0)

    def __setattr__(self, name, value):
        raise AttributeError("BigInt is immutable")

    @classmethod
    def _make(cls, mag: List[int], sign: int) -> 'BigInt':
        obj = cls.__new__(cls)
        obj._set(mag, sign)
        return obj

    # ------------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------------

    @classmethod
    def value_of(cls, value: int) -> 'BigInt':
        """BigInt from a Python int."""
        return cls(value)

    @classmethod
    def from_decimal_string(cls, text: str) -> 'BigInt':
        return cls._make(*_parse(text, 10))

    @classmethod
    def from_radix_string(cls, text: str, radix: int) -> 'BigInt':
        """
        Parse an optionally signed digit string.

        Raises:
            ValueError: On an empty string, a bad digit, or radix outside 2-36
        """
        return cls._make(*_parse(text, radix))

    @classmethod
    def from_bytes(cls, data: bytes) -> 'BigInt':
        """
        BigInt from big-endian two's-complement bytes.

        An empty input is zero.
        """
        if not data:
            return cls.ZERO
        if data[0] & 0x80:
            return cls._make(_bytes_to_mag(bytes(_twos_complement(bytearray(data)))), -1)
        return cls._make(_bytes_to_mag(data), 1)

    @classmethod
    def from_unsigned_bytes(cls, data: bytes) -> 'BigInt':
        """BigInt from big-endian unsigned bytes (never negative)."""
        return cls._make(_bytes_to_mag(data), 1)

    @classmethod
    def random_bits(cls, bits: int, rng: RandomSource = secrets.token_bytes) -> 'BigInt':
        """Uniform random non-negative value below 2^bits."""
        if bits < 0:
            raise ValueError("Bit count must be non-negative")
        if bits == 0:
            return cls.ZERO
        num_bytes = (bits + 7) // 8
        data = bytearray(rng(num_bytes))
        data[0] &= 0xFF >> (num_bytes * 8 - bits)
        return cls.from_unsigned_bytes(bytes(data))

    @classmethod
    def random_below(cls, bound: 'BigInt', rng: RandomSource = secrets.token_bytes) -> 'BigInt':
        """Uniform random value in [0, bound) by rejection sampling."""
        if bound.signum <= 0:
            raise ValueError("Bound must be positive")
        bits = bound.bit_length()
        while True:
            candidate = cls.random_bits(bits, rng)
            if candidate < bound:
                return candidate

    # ------------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------------

    @property
    def signum(self) -> int:
        """-1, 0 or 1."""
        return self._sign

    @property
    def limbs(self) -> Tuple[int, ...]:
        """Magnitude limbs, least significant first."""
        return self._mag

    def bit_length(self) -> int:
        """Number of bits in the magnitude (0 for zero)."""
        if not self._mag:
            return 0
        return (len(self._mag) - 1) * LIMB_BITS + self._mag[-1].bit_length()

    def test_bit(self, n: int) -> bool:
        """True if bit n of the magnitude is set."""
        if n < 0:
            raise ValueError("Bit index must be non-negative")
        limb, bit = divmod(n, LIMB_BITS)
        return limb < len(self._mag) and bool((self._mag[limb] >> bit) & 1)

    def is_odd(self) -> bool:
        return bool(self._mag) and bool(self._mag[0] & 1)

    def is_even(self) -> bool:
        return not self.is_odd()

    # ------------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------------

    def negate(self) -> 'BigInt':
        return BigInt._make(list(self._mag), -self._sign)

    def abs(self) -> 'BigInt':
        return self.negate() if self._sign < 0 else self

    def add(self, other: 'BigInt') -> 'BigInt':
        if self._sign == 0:
            return other
        if other._sign == 0:
            return self
        if self._sign == other._sign:
            return BigInt._make(_add_mag(self._mag, other._mag), self._sign)

        cmp = _compare_mag(self._mag, other._mag)
        if cmp == 0:
            return BigInt.ZERO
        if cmp > 0:
            return BigInt._make(_sub_mag(self._mag, other._mag), self._sign)
        return BigInt._make(_sub_mag(other._mag, self._mag), other._sign)

    def subtract(self, other: 'BigInt') -> 'BigInt':
        return self.add(other.negate())

    def multiply(self, other: 'BigInt') -> 'BigInt':
        if self._sign == 0 or other._sign == 0:
            return BigInt.ZERO
        return BigInt._make(_mul_mag(self._mag, other._mag), self._sign * other._sign)

    def divide_and_remainder(self, other: 'BigInt') -> Tuple['BigInt', 'BigInt']:
        """
        Truncating division.

        The quotient is rounded toward zero and the remainder takes the
        sign of the dividend, so ``q * other + r == self``.

        Raises:
            DivisionByZero: If other is zero
        """
        if other._sign == 0:
            raise DivisionByZero("Division by zero")
        if self._sign == 0:
            return BigInt.ZERO, BigInt.ZERO
        q, r = _divmod_mag(self._mag, other._mag)
        return BigInt._make(q, self._sign * other._sign), BigInt._make(r, self._sign)

    def divide(self, other: 'BigInt') -> 'BigInt':
        return self.divide_and_remainder(other)[0]

    def remainder(self, other: 'BigInt') -> 'BigInt':
        return self.divide_and_remainder(other)[1]

    def mod(self, m: 'BigInt') -> 'BigInt':
        """
        Non-negative residue modulo a positive m.

        Raises:
            DivisionByZero: If m is zero
            NonPositiveModulus: If m is negative
        """
        if m._sign == 0:
            raise DivisionByZero("Division by zero")
        if m._sign < 0:
            raise NonPositiveModulus("Modulus must be positive")
        r = self.remainder(m)
        return r.add(m) if r._sign < 0 else r

    def mod_pow(self, exponent: 'BigInt', modulus: 'BigInt') -> 'BigInt':
        """
        Modular exponentiation (self^exponent mod modulus).

        Scans exponent bits from least significant, squaring the base and
        multiplying it into the result when the bit is set. Odd moduli use
        Montgomery multiplication; even moduli reduce after every multiply.
        A negative exponent inverts the base first.

        Raises:
            NonPositiveModulus: If modulus <= 0
            NotInvertible: If exponent < 0 and self has no inverse
        """
        if modulus._sign <= 0:
            raise NonPositiveModulus("Modulus must be positive")
        if modulus._mag == (1,):
            return BigInt.ZERO

        base = self
        if exponent._sign < 0:
            base = self.mod_inverse(modulus)
            if base is None:
                raise NotInvertible("Base is not invertible for this modulus")
            exponent = exponent.negate()

        if exponent._sign == 0:
            return BigInt.ONE

        reduced = list(base.mod(modulus)._mag)
        if not reduced:
            return BigInt.ZERO
        if modulus.is_odd():
            mag = _mont_pow(reduced, list(exponent._mag), list(modulus._mag))
        else:
            mag = _plain_pow(reduced, list(exponent._mag), list(modulus._mag))
        return BigInt._make(mag, 1)

    def mod_inverse(self, m: 'BigInt') -> Optional['BigInt']:
        """
        Modular multiplicative inverse by the extended Euclidean algorithm.

        Returns:
            x with (self * x) mod m == 1, or None when gcd(self, m) != 1
            or m <= 0
        """
        if m._sign <= 0:
            return None
        old_r, r = self.mod(m), m
        old_s, s = BigInt.ONE, BigInt.ZERO
        while r._sign:
            q, rem = old_r.divide_and_remainder(r)
            old_r, r = r, rem
            old_s, s = s, old_s.subtract(q.multiply(s))
        if old_r != BigInt.ONE:
            return None
        return old_s.mod(m)

    def gcd(self, other: 'BigInt') -> 'BigInt':
        a, b = self.abs(), other.abs()
        while b._sign:
            a, b = b, a.remainder(b)
        return a

    def shift_left(self, n: int) -> 'BigInt':
        if n < 0:
            return self.shift_right(-n)
        return BigInt._make(_shift_left_mag(self._mag, n), self._sign)

    def shift_right(self, n: int) -> 'BigInt':
        """Arithmetic right shift (floor division by 2^n)."""
        if n < 0:
            return self.shift_left(-n)
        if self._sign >= 0:
            return BigInt._make(_shift_right_mag(self._mag, n), self._sign)
        # Round toward negative infinity like two's complement would
        shifted = BigInt._make(_shift_right_mag(self._mag, n), -1)
        if BigInt._make(_shift_left_mag(shifted._mag, n), 1) != self.abs():
            shifted = shifted.subtract(BigInt.ONE)
        return shifted

    # ------------------------------------------------------------------------
    # Primality
    # ------------------------------------------------------------------------

    def is_probable_prime(self, rounds: int = MIN_MILLER_RABIN_ROUNDS,
                          rng: RandomSource = secrets.token_bytes) -> bool:
        """
        Miller-Rabin primality test with random bases in [2, n-2].

        Probability of a composite passing is at most 4^-rounds.
        """
        n = self
        if n._sign <= 0 or n == BigInt.ONE:
            return False
        if len(n._mag) == 1 and n._mag[0] <= SMALL_PRIMES[-1]:
            return n._mag[0] in SMALL_PRIMES
        for p in SMALL_PRIMES:
            if _divmod_small(n._mag, p)[1] == 0:
                return False

        n_minus_one = n.subtract(BigInt.ONE)
        d = n_minus_one
        r = 0
        while d.is_even():
            d = d.shift_right(1)
            r += 1

        base_range = n.subtract(BigInt.value_of(3))
        for _ in range(rounds):
            a = BigInt.random_below(base_range, rng).add(BigInt.TWO)
            x = a.mod_pow(d, n)
            if x == BigInt.ONE or x == n_minus_one:
                continue
            for _ in range(r - 1):
                x = x.mod_pow(BigInt.TWO, n)
                if x == n_minus_one:
                    break
            else:
                return False
        return True

    @classmethod
    def probable_prime(cls, bit_length: int, rng: RandomSource = secrets.token_bytes,
                       **overrides) -> 'BigInt':
        """
        Random probable prime of exactly bit_length bits.

        Candidates are odd with the top bit forced set and must pass
        Miller-Rabin with at least 20 rounds.

        Args:
            bit_length: Bit length of the prime (>= 2)
            rng: Byte source, defaults to secrets.token_bytes
            **overrides: miller_rabin_rounds, max_prime_attempts

        Raises:
            ValueError: If bit_length < 2
            PrimeGenerationError: If no prime is found within max_prime_attempts
        """
        if bit_length < 2:
            raise ValueError("Bit length must be at least 2")
        config = get_config(**overrides)
        top_limb, top_bit = divmod(bit_length - 1, LIMB_BITS)

        for _ in range(config['max_prime_attempts']):
            mag = list(cls.random_bits(bit_length, rng)._mag)
            mag.extend([0] * (top_limb + 1 - len(mag)))
            mag[top_limb] |= 1 << top_bit
            mag[0] |= 1
            candidate = cls._make(mag, 1)
            if candidate.is_probable_prime(config['miller_rabin_rounds'], rng):
                return candidate

        raise PrimeGenerationError(
            f"No {bit_length}-bit prime found in {config['max_prime_attempts']} candidates"
        )

    # ------------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """
        Minimal big-endian two's-complement encoding.

        Non-negative values get a leading zero byte when their top bit is
        set; zero encodes as a single zero byte.
        """
        if self._sign == 0:
            return b'\x00'
        raw = bytearray(_mag_to_bytes(self._mag))
        if self._sign > 0:
            if raw[0] & 0x80:
                raw.insert(0, 0)
            return bytes(raw)
        _twos_complement(raw)
        if not raw[0] & 0x80:
            raw.insert(0, 0xFF)
        return bytes(raw)

    def to_unsigned_bytes(self, length: Optional[int] = None) -> bytes:
        """
        Big-endian unsigned encoding, left-padded with zeros to length.

        Raises:
            ValueError: If the value is negative or does not fit in length bytes
        """
        if self._sign < 0:
            raise ValueError("Negative value has no unsigned encoding")
        raw = _mag_to_bytes(self._mag)
        if length is None:
            return raw or b'\x00'
        if len(raw) > length:
            raise ValueError(f"Value needs {len(raw)} bytes, only {length} available")
        return b'\x00' * (length - len(raw)) + raw

    def to_string(self, radix: int = 10) -> str:
        """Digit string in radix (lowercase letters above 9)."""
        _check_radix(radix)
        if self._sign == 0:
            return "0"
        # Peel off as many digits per division as fit in one limb
        chunk_digits = 1
        while radix ** (chunk_digits + 1) < BASE:
            chunk_digits += 1
        chunk = radix ** chunk_digits

        groups = []
        mag = list(self._mag)
        while mag:
            mag, rem = _divmod_small(mag, chunk)
            groups.append(rem)

        pieces = []
        for index, group in enumerate(reversed(groups)):
            digits = []
            while group:
                group, d = divmod(group, radix)
                digits.append(DIGITS[d])
            text = "".join(reversed(digits))
            pieces.append(text if index == 0 else text.rjust(chunk_digits, "0"))
        return ("-" if self._sign < 0 else "") + "".join(pieces)

    def to_decimal_string(self) -> str:
        return self.to_string(10)

    def __int__(self) -> int:
        value = 0
        for limb in reversed(self._mag):
            value = (value << LIMB_BITS) | limb
        return -value if self._sign < 0 else value

    # ------------------------------------------------------------------------
    # Operators and comparison
    # ------------------------------------------------------------------------

    def compare_to(self, other: 'BigInt') -> int:
        """Order by sign, then by magnitude from the most significant limb."""
        if self._sign != other._sign:
            return 1 if self._sign > other._sign else -1
        cmp = _compare_mag(self._mag, other._mag)
        return cmp if self._sign >= 0 else -cmp

    def __add__(self, other): return self.add(_coerce(other))
    def __radd__(self, other): return _coerce(other).add(self)
    def __sub__(self, other): return self.subtract(_coerce(other))
    def __rsub__(self, other): return _coerce(other).subtract(self)
    def __mul__(self, other): return self.multiply(_coerce(other))
    def __rmul__(self, other): return _coerce(other).multiply(self)
    def __mod__(self, other): return self.mod(_coerce(other))
    def __neg__(self): return self.negate()
    def __abs__(self): return self.abs()
    def __lshift__(self, n: int): return self.shift_left(n)
    def __rshift__(self, n: int): return self.shift_right(n)
    def __bool__(self): return self._sign != 0

    def __eq__(self, other):
        if isinstance(other, int) and not isinstance(other, bool):
            other = BigInt(other)
        if not isinstance(other, BigInt):
            return NotImplemented
        return self._sign == other._sign and self._mag == other._mag

    def __lt__(self, other): return self.compare_to(_coerce(other)) < 0
    def __le__(self, other): return self.compare_to(_coerce(other)) <= 0
    def __gt__(self, other): return self.compare_to(_coerce(other)) > 0
    def __ge__(self, other): return self.compare_to(_coerce(other)) >= 0

    def __hash__(self) -> int:
        return hash(int(self))

    def __reduce__(self):
        return (BigInt, (self.to_string(16), 16))

    def __str__(self) -> str:
        return self.to_string(10)

    def __repr__(self) -> str:
        return f"BigInt('{self.to_string(10)}')"


def _coerce(value) -> BigInt:
    if isinstance(value, BigInt):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return BigInt(value)
    raise TypeError(f"Unsupported operand type: {type(value).__name__}")


def _check_radix(radix: int) -> None:
    if not 2 <= radix <= 36:
        raise ValueError(f"Radix must be between 2 and 36, got {radix}")


def _parse(text: str, radix: int) -> Tuple[List[int], int]:
    """Parse an optionally signed digit string into (magnitude, sign)."""
    _check_radix(radix)
    sign = 1
    start = 0
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        start = 1
    if start == len(text):
        raise ValueError(f"No digits in {text!r}")

    mag: List[int] = []
    for ch in text[start:]:
        digit = DIGITS.find(ch.lower())
        if digit < 0 or digit >= radix:
            raise ValueError(f"Invalid digit {ch!r} for radix {radix}")
        mag = _mul_add_small(mag, radix, digit)
    return mag, sign


def _split_int(value: int) -> Tuple[List[int], int]:
    """Split a Python int into limbs."""
    sign = (value > 0) - (value < 0)
    value = abs(value)
    mag = []
    while value:
        mag.append(value & MASK_32)
        value >>= LIMB_BITS
    return mag, sign


BigInt.ZERO = BigInt._make([], 0)
BigInt.ONE = BigInt._make([1], 1)
BigInt.TWO = BigInt._make([2], 1)
