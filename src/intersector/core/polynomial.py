"""Polynomial evaluation and real root finding.

Closed-form solvers cover degrees one to four (linear, quadratic, Cardano's
cubic, Ferrari's quartic). Cubic and quartic estimates are then refined by
Newton iteration inside brackets cut at the roots of the derivative. Roots
inside an interval are isolated for any degree by bisection between the
roots of the derivative.

The solvers follow Kevin Lindsey's polynomial library, whose cubic and
quartic solvers are in turn based on David Eberly's MgcPolynomial.

Coefficients are passed from highest to lowest degree, as in
``Polynomial([1, 0, -4])`` for ``x**2 - 4``. Internally ``coefs[i]`` holds
the coefficient of ``x**i``.
"""

import logging
import math
from collections.abc import Iterable, Sequence

from intersector.config.settings import ACCURACY, TOLERANCE, ToleranceConfig
from intersector.exceptions import NumericInputError

logger = logging.getLogger(__name__)

# Relative precision of refined roots and of the Cardano discriminant snap
_EPSILON = 1e-14
_MAX_REFINE_STEPS = 100


def _cbrt(value: float) -> float:
    """Real cube root, defined for negative values."""
    return math.copysign(abs(value) ** (1.0 / 3.0), value)


class Polynomial:
    """A real polynomial with tolerance-aware root finding.

    Polynomials are treated as immutable except for ``simplify`` and
    ``divide_scalar``, which mutate in place.

    Attributes:
        coefs: Coefficients, lowest degree first
        tolerance: Zero threshold for coefficients, discriminants and residuals
        accuracy: Decimal digits targeted by bisection
    """

    def __init__(
        self,
        coefficients: Iterable[float] = (),
        tolerance: float = TOLERANCE,
        accuracy: int = ACCURACY,
    ) -> None:
        self.coefs: list[float] = [float(c) for c in coefficients][::-1]
        self.tolerance = tolerance
        self.accuracy = accuracy

    @classmethod
    def from_config(cls, coefficients: Iterable[float], config: ToleranceConfig) -> "Polynomial":
        """Create a polynomial using the tolerances of a ToleranceConfig."""
        return cls(coefficients, tolerance=config.tolerance, accuracy=config.accuracy)

    def _with_coefs(self, ascending: list[float]) -> "Polynomial":
        result = Polynomial(tolerance=self.tolerance, accuracy=self.accuracy)
        result.coefs = ascending
        return result

    @property
    def degree(self) -> int:
        return len(self.coefs) - 1

    @property
    def coefficients(self) -> list[float]:
        """Coefficients from highest to lowest degree."""
        return self.coefs[::-1]

    def __call__(self, x: float) -> float:
        return self.evaluate(x)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.coefs == other.coefs

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Polynomial({self.coefficients!r})"

    def evaluate(self, x: float) -> float:
        """Evaluate the polynomial at ``x`` using Horner's method.

        Raises:
            NumericInputError: If x is NaN
        """
        if math.isnan(x):
            raise NumericInputError("Polynomial.evaluate", x, "parameter must be a number")
        result = 0.0
        for coef in reversed(self.coefs):
            result = result * x + coef
        return result

    def simplify(self) -> "Polynomial":
        """Strip leading coefficients whose magnitude is within tolerance.

        The degree drops accordingly and may reach -1 for the zero polynomial.
        Idempotent. Returns self for chaining.
        """
        while self.coefs and abs(self.coefs[-1]) <= self.tolerance:
            self.coefs.pop()
        return self

    def get_derivative(self) -> "Polynomial":
        """Return the term-wise derivative; a constant yields the zero polynomial."""
        derived = [i * self.coefs[i] for i in range(1, len(self.coefs))]
        return self._with_coefs(derived or [0.0])

    def mult(self, other: "Polynomial") -> "Polynomial":
        """Multiply two polynomials (convolution of the coefficient lists)."""
        if not self.coefs or not other.coefs:
            return self._with_coefs([])
        product = [0.0] * (len(self.coefs) + len(other.coefs) - 1)
        for i, a in enumerate(self.coefs):
            for j, b in enumerate(other.coefs):
                product[i + j] += a * b
        return self._with_coefs(product)

    def divide_scalar(self, scalar: float) -> "Polynomial":
        """Divide every coefficient by ``scalar`` in place.

        Raises:
            NumericInputError: If the scalar is within tolerance of zero
        """
        if math.isnan(scalar) or abs(scalar) <= self.tolerance:
            raise NumericInputError("Polynomial.divide_scalar", scalar, "divisor is zero or too small")
        self.coefs = [c / scalar for c in self.coefs]
        return self

    def get_roots(self) -> list[float]:
        """Find the real roots with the closed-form solver for the degree.

        Simplifies first. Cubic and quartic roots are refined against the
        polynomial itself, so every root returned has a residual near
        machine precision. Degrees above four are not supported and yield no
        roots; use ``get_roots_in_interval`` for those.

        Returns:
            Real roots; cubic and quartic roots come back in ascending order
        """
        self.simplify()
        if self.degree == 1:
            return self.get_linear_root()
        if self.degree == 2:
            return self.get_quadratic_roots()
        if self.degree == 3:
            return self.get_cubic_roots()
        if self.degree == 4:
            return self.get_quartic_roots()
        return []

    def get_linear_root(self) -> list[float]:
        a = self.coefs[1]
        if a != 0:
            return [-self.coefs[0] / a]
        return []

    def get_quadratic_roots(self) -> list[float]:
        if self.degree != 2:
            return []
        a = self.coefs[2]
        b = self.coefs[1] / a
        c = self.coefs[0] / a
        discrim = b * b - 4 * c
        if abs(discrim) <= self.tolerance:
            return [-0.5 * b]
        if discrim > 0:
            # Avoid cancellation in the root of smaller magnitude
            q = -0.5 * (b + math.copysign(math.sqrt(discrim), b))
            return [q, c / q]
        return []

    def get_cubic_roots(self) -> list[float]:
        """Real roots of a cubic, Cardano estimates refined in place."""
        if self.degree != 3:
            return []
        return self._refine_roots(self._cardano())

    def get_quartic_roots(self) -> list[float]:
        """Real roots of a quartic, Ferrari estimates refined in place."""
        if self.degree != 4:
            return []
        return self._refine_roots(self._ferrari())

    def _cardano(self) -> list[float]:
        """Cardano's method on the depressed cubic.

        The sign of ``(b/2)**2 + (a/3)**3`` selects one real root, three real
        roots (trigonometric form) or a repeated root.
        """
        c3 = self.coefs[3]
        c2 = self.coefs[2] / c3
        c1 = self.coefs[1] / c3
        c0 = self.coefs[0] / c3

        a = (3 * c1 - c2 * c2) / 3
        b = (2 * c2 * c2 * c2 - 9 * c1 * c2 + 27 * c0) / 27
        offset = c2 / 3
        discrim = b * b / 4 + a * a * a / 27
        half_b = b / 2

        # Snap relative to the terms so that small cubics keep their sign
        if abs(discrim) <= _EPSILON * (b * b / 4 + abs(a * a * a) / 27):
            discrim = 0.0

        if discrim > 0:
            e = math.sqrt(discrim)
            root = _cbrt(-half_b + e) + _cbrt(-half_b - e)
            return [root - offset]

        if discrim < 0:
            distance = math.sqrt(-a / 3)
            angle = math.atan2(math.sqrt(-discrim), -half_b) / 3
            cos = math.cos(angle)
            sin = math.sin(angle)
            sqrt3 = math.sqrt(3)
            return [
                2 * distance * cos - offset,
                -distance * (cos + sqrt3 * sin) - offset,
                -distance * (cos - sqrt3 * sin) - offset,
            ]

        tmp = -_cbrt(half_b)
        return [2 * tmp - offset, -tmp - offset]

    def _ferrari(self) -> list[float]:
        """Ferrari's method.

        The largest real root of the resolvent cubic factors the quartic into
        two real quadratics whose roots are solved directly. Square roots of
        quantities that are negative beyond tolerance mean no real roots.
        """
        tol = self.tolerance
        c4 = self.coefs[4]
        c3 = self.coefs[3] / c4
        c2 = self.coefs[2] / c4
        c1 = self.coefs[1] / c4
        c0 = self.coefs[0] / c4

        resolvent = Polynomial(
            [1, -c2, c3 * c1 - 4 * c0, -c3 * c3 * c0 + 4 * c2 * c0 - c1 * c1],
            tolerance=tol,
            accuracy=self.accuracy,
        )
        resolvent_roots = resolvent.get_cubic_roots()
        if not resolvent_roots:
            return []
        y = max(resolvent_roots)

        discrim = c3 * c3 / 4 - c2 + y
        if abs(discrim) <= tol:
            discrim = 0.0

        results: list[float] = []
        if discrim > 0:
            e = math.sqrt(discrim)
            t1 = 0.75 * c3 * c3 - e * e - 2 * c2
            t2 = (4 * c3 * c2 - 8 * c1 - c3 * c3 * c3) / (4 * e)
            plus = t1 + t2
            minus = t1 - t2
            if abs(plus) <= tol:
                plus = 0.0
            if abs(minus) <= tol:
                minus = 0.0
            if plus >= 0:
                f = math.sqrt(plus)
                results.append(-0.25 * c3 + 0.5 * (e + f))
                results.append(-0.25 * c3 + 0.5 * (e - f))
            if minus >= 0:
                f = math.sqrt(minus)
                results.append(-0.25 * c3 + 0.5 * (f - e))
                results.append(-0.25 * c3 - 0.5 * (f + e))
        elif discrim < 0:
            logger.debug("Negative quartic resolvent discriminant: %g", discrim)
        else:
            t2 = y * y - 4 * c0
            if t2 >= -tol:
                t2 = 2 * math.sqrt(max(t2, 0.0))
                t1 = 0.75 * c3 * c3 - 2 * c2
                if t1 + t2 >= tol:
                    d = math.sqrt(t1 + t2)
                    results.append(-0.25 * c3 + 0.5 * d)
                    results.append(-0.25 * c3 - 0.5 * d)
                if t1 - t2 >= tol:
                    d = math.sqrt(t1 - t2)
                    results.append(-0.25 * c3 + 0.5 * d)
                    results.append(-0.25 * c3 - 0.5 * d)
        return results

    def _refine_roots(self, estimates: list[float]) -> list[float]:
        """Turn closed-form estimates into accurate roots of this polynomial.

        The real line is cut at the roots of the derivative and at the Cauchy
        bound ``1 + max|c_i / c_n|``, which leaves monotonic pieces. Every
        piece whose ends change sign holds exactly one simple root, solved by
        safeguarded Newton iteration seeded with the estimate lying inside
        it. A stationary point whose monic value is within tolerance of zero
        and which does not cross zero is kept as a repeated (tangential)
        root.

        Args:
            estimates: Closed-form roots, used as starting points only

        Returns:
            Roots in ascending order
        """
        lead = self.coefs[-1]
        bound = 1.0 + max(abs(c / lead) for c in self.coefs[:-1])
        derivative = self.get_derivative()
        critical = sorted(c for c in derivative.get_roots() if -bound < c < bound)
        cuts = [-bound, *critical, bound]

        roots: list[float] = []
        for lo, hi in zip(cuts, cuts[1:]):
            f_lo = self.evaluate(lo)
            f_hi = self.evaluate(hi)
            if f_lo != 0 and f_hi != 0 and (f_lo < 0) != (f_hi < 0):
                guess = next((e for e in estimates if lo < e < hi), None)
                roots.append(self._solve_bracketed(lo, hi, f_lo, derivative, guess))

        second = derivative.get_derivative()
        for c in critical:
            value = self.evaluate(c)
            if abs(value) > self.tolerance * abs(lead):
                continue
            # Touching zero without crossing it: a minimum above or a maximum below
            if value == 0 or value * second.evaluate(c) > 0:
                roots.append(c)

        if len(roots) != len(estimates):
            logger.debug("Refined %d closed-form estimates into %d roots", len(estimates), len(roots))
        return sorted(roots)

    def _solve_bracketed(
        self,
        lo: float,
        hi: float,
        f_lo: float,
        derivative: "Polynomial",
        guess: float | None = None,
    ) -> float:
        """Newton iteration kept inside a sign-changing bracket.

        Steps that leave the bracket fall back to bisection, and the bracket
        shrinks on every step, so the iteration always converges.
        """
        x = guess if guess is not None and lo < guess < hi else 0.5 * (lo + hi)
        for _ in range(_MAX_REFINE_STEPS):
            fx = self.evaluate(x)
            if fx == 0:
                return x
            if (fx < 0) == (f_lo < 0):
                lo, f_lo = x, fx
            else:
                hi = x
            slope = derivative.evaluate(x)
            step = x - fx / slope if slope != 0 else lo
            if not lo < step < hi:
                step = 0.5 * (lo + hi)
            if abs(step - x) <= _EPSILON * max(1.0, abs(x)):
                return step
            x = step
        return x

    def get_roots_in_interval(self, min_x: float, max_x: float) -> list[float]:
        """Find the real roots in [min_x, max_x] for any degree.

        The roots of the derivative split the interval into monotonic pieces,
        and each piece whose ends change sign is bisected.

        Returns:
            Roots in ascending order
        """
        if self.degree <= 0:
            return []
        if self.degree == 1:
            bounds = [min_x, max_x]
        else:
            bounds = [min_x, *self.get_derivative().get_roots_in_interval(min_x, max_x), max_x]

        roots: list[float] = []
        for lo, hi in zip(bounds, bounds[1:]):
            root = self.bisection(lo, hi)
            if root is not None and (not roots or root != roots[-1]):
                roots.append(root)
        return roots

    def bisection(self, min_x: float, max_x: float) -> float | None:
        """Find one root between ``min_x`` and ``max_x`` by bisection.

        An end whose value is within tolerance of zero is returned as is.
        Otherwise the values at both ends must differ in sign; the number of
        halvings is ``ceil((ln(max - min) + accuracy * ln 10) / ln 2)``.

        Returns:
            The root, or None if the ends do not bracket a root
        """
        min_value = self.evaluate(min_x)
        max_value = self.evaluate(max_x)

        if abs(min_value) <= self.tolerance:
            return min_x
        if abs(max_value) <= self.tolerance:
            return max_x
        if min_value * max_value > 0:
            return None

        iterations = math.ceil(
            (math.log(abs(max_x - min_x)) + math.log(10) * self.accuracy) / math.log(2)
        )
        result = 0.5 * (min_x + max_x)
        for _ in range(max(iterations, 0)):
            result = 0.5 * (min_x + max_x)
            value = self.evaluate(result)
            if abs(value) <= self.tolerance:
                break
            if value * min_value < 0:
                max_x = result
            else:
                min_x = result
                min_value = value
        return result

    @staticmethod
    def interpolate(
        xs: Sequence[float], ys: Sequence[float], n: int, offset: int, x: float
    ) -> tuple[float, float]:
        """Neville interpolation through ``n`` samples starting at ``offset``.

        Args:
            xs: Sample abscissae
            ys: Sample values
            n: Number of samples to use
            offset: Index of the first sample
            x: Where to evaluate the interpolating polynomial

        Returns:
            Tuple of (value, error estimate); (0.0, 0.0) if two abscissae coincide
        """
        c = [0.0] * n
        d = [0.0] * n
        ns = 0
        diff = abs(x - xs[offset])
        for i in range(n):
            dift = abs(x - xs[offset + i])
            if dift < diff:
                ns = i
                diff = dift
            c[i] = d[i] = ys[offset + i]

        y = ys[offset + ns]
        dy = 0.0
        ns -= 1
        for m in range(1, n):
            for i in range(n - m):
                ho = xs[offset + i] - x
                hp = xs[offset + i + m] - x
                w = c[i + 1] - d[i]
                den = ho - hp
                if den == 0.0:
                    return (0.0, 0.0)
                den = w / den
                d[i] = hp * den
                c[i] = ho * den
            if 2 * (ns + 1) < n - m:
                dy = c[ns + 1]
            else:
                dy = d[ns]
                ns -= 1
            y += dy
        return (y, dy)
