from __future__ import annotations

from satsforex.schemas.validation import ValidationIssue, ValidationResult


def _result(issues: list[ValidationIssue]) -> ValidationResult:
    status = "ok"
    if any(issue.level == "fail" for issue in issues):
        status = "fail"
    elif issues:
        status = "warn"
    return ValidationResult(status=status, issues=issues)


def validate_price_data(
    prices: dict[str, float],
    reference_fiat: str,
    expected_codes: list[str] | None = None,
) -> ValidationResult:
    issues: list[ValidationIssue] = []

    if not prices:
        issues.append(
            ValidationIssue(
                field="price.quotes",
                level="fail",
                message="Price response contains no usable quotes.",
            )
        )

    reference = reference_fiat.strip().upper()
    if prices and reference not in prices:
        issues.append(
            ValidationIssue(
                field=f"price.quotes.{reference}",
                level="fail",
                message=f"Reference price {reference} is missing.",
            )
        )

    if expected_codes:
        missing = sorted(
            {code.strip().upper() for code in expected_codes} - set(prices)
        )
        if missing and prices:
            issues.append(
                ValidationIssue(
                    field="price.quotes",
                    level="warn",
                    message="No quote for: " + ", ".join(missing),
                )
            )

    return _result(issues)


def validate_gdp_data(rows: dict[str, dict], min_countries: int) -> ValidationResult:
    issues: list[ValidationIssue] = []

    if len(rows) < min_countries:
        issues.append(
            ValidationIssue(
                field="gdp.countries",
                level="fail",
                message=(
                    f"Only found {len(rows)} countries, "
                    f"which is less than the expected minimum of {min_countries}."
                ),
            )
        )

    unlabeled = [code for code, row in rows.items() if not row.get("label")]
    if unlabeled:
        issues.append(
            ValidationIssue(
                field="gdp.countries.label",
                level="warn",
                message="Missing label for: " + ", ".join(sorted(unlabeled)),
            )
        )

    return _result(issues)
