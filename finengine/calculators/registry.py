"""Closed catalogue of metric identifiers bound to calculator methods.

The default registry is built and validated at import so that a metric id
without an implementation is a start-up failure rather than a per-call one.
Lookups accept the display name, any alias, or the snake_case id,
case-insensitively.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from finengine.core.config import CalculationConfig
from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators.activity_calculator import ActivityCalculator
from finengine.calculators.cash_flow_calculator import CashFlowCalculator
from finengine.calculators.derivatives_calculator import DerivativesCalculator
from finengine.calculators.industry_calculator import BankingCalculator, InsuranceCalculator
from finengine.calculators.intermediate_calculator import IntermediateCalculator
from finengine.calculators.leverage_calculator import LeverageCalculator
from finengine.calculators.liquidity_calculator import LiquidityCalculator
from finengine.calculators.market_calculator import MarketCalculator
from finengine.calculators.profitability_calculator import ProfitabilityCalculator
from finengine.calculators.risk_calculator import RiskCalculator
from finengine.calculators.valuation_calculator import ValuationCalculator

logger = logging.getLogger(__name__)

MetricFunction = Callable[[FinancialDataRecord], MetricResult]


class MetricId(str, Enum):
    # Liquidity
    CURRENT_RATIO = "current_ratio"
    QUICK_RATIO = "quick_ratio"
    CASH_RATIO = "cash_ratio"
    WORKING_CAPITAL = "working_capital"
    NET_WORKING_CAPITAL_RATIO = "net_working_capital_ratio"
    OPERATING_CASH_FLOW_RATIO = "operating_cash_flow_ratio"
    DEFENSIVE_INTERVAL = "defensive_interval"
    CASH_COVERAGE = "cash_coverage"
    DAYS_CASH_ON_HAND = "days_cash_on_hand"
    # Leverage
    DEBT_TO_EQUITY = "debt_to_equity"
    DEBT_RATIO = "debt_ratio"
    EQUITY_RATIO = "equity_ratio"
    INTEREST_COVERAGE = "interest_coverage"
    LONG_TERM_DEBT_TO_EQUITY = "long_term_debt_to_equity"
    DEBT_TO_CAPITAL = "debt_to_capital"
    TOTAL_CAPITALIZATION = "total_capitalization"
    FIXED_CHARGE_COVERAGE = "fixed_charge_coverage"
    DEBT_SERVICE_COVERAGE = "debt_service_coverage"
    EQUITY_MULTIPLIER = "equity_multiplier"
    DEBT_TO_EBITDA = "debt_to_ebitda"
    LONG_TERM_DEBT_RATIO = "long_term_debt_ratio"
    SHORT_TERM_DEBT_RATIO = "short_term_debt_ratio"
    # Activity
    ASSET_TURNOVER = "asset_turnover"
    FIXED_ASSET_TURNOVER = "fixed_asset_turnover"
    INVENTORY_TURNOVER = "inventory_turnover"
    RECEIVABLES_TURNOVER = "receivables_turnover"
    PAYABLES_TURNOVER = "payables_turnover"
    WORKING_CAPITAL_TURNOVER = "working_capital_turnover"
    CURRENT_ASSET_TURNOVER = "current_asset_turnover"
    CASH_TURNOVER = "cash_turnover"
    INVESTMENT_TURNOVER = "investment_turnover"
    DAYS_SALES_OUTSTANDING = "days_sales_outstanding"
    DAYS_INVENTORY_OUTSTANDING = "days_inventory_outstanding"
    DAYS_PAYABLE_OUTSTANDING = "days_payable_outstanding"
    REVENUE_PER_EMPLOYEE = "revenue_per_employee"
    PROFIT_PER_EMPLOYEE = "profit_per_employee"
    # Profitability
    GROSS_PROFIT_MARGIN = "gross_profit_margin"
    OPERATING_PROFIT_MARGIN = "operating_profit_margin"
    NET_PROFIT_MARGIN = "net_profit_margin"
    PRETAX_PROFIT_MARGIN = "pretax_profit_margin"
    RETURN_ON_ASSETS = "return_on_assets"
    RETURN_ON_EQUITY = "return_on_equity"
    OPERATING_RETURN_ON_ASSETS = "operating_return_on_assets"
    EBITDA = "ebitda"
    EBITDA_MARGIN = "ebitda_margin"
    EBIAT = "ebiat"
    OPERATING_CASH_FLOW_MARGIN = "operating_cash_flow_margin"
    CASH_RETURN_ON_ASSETS = "cash_return_on_assets"
    NET_PROFIT_MARGIN_AFTER_TAX = "net_profit_margin_after_tax"
    RETURN_ON_SALES = "return_on_sales"
    RETURN_ON_TOTAL_CAPITAL = "return_on_total_capital"
    RETURN_ON_COMMON_EQUITY = "return_on_common_equity"
    BASIC_EARNING_POWER = "basic_earning_power"
    OPERATING_EFFICIENCY = "operating_efficiency"
    COGS_RATIO = "cogs_ratio"
    SELLING_EXPENSE_RATIO = "selling_expense_ratio"
    ADMINISTRATIVE_EXPENSE_RATIO = "administrative_expense_ratio"
    INTEREST_EXPENSE_RATIO = "interest_expense_ratio"
    TAX_EFFICIENCY = "tax_efficiency"
    DUPONT_ROE = "dupont_roe"
    # Market
    PRICE_TO_EARNINGS = "price_to_earnings"
    PRICE_TO_BOOK = "price_to_book"
    MARKET_TO_BOOK = "market_to_book"
    DIVIDEND_YIELD = "dividend_yield"
    DIVIDEND_PAYOUT = "dividend_payout"
    PRICE_TO_SALES = "price_to_sales"
    PRICE_TO_CASH_FLOW = "price_to_cash_flow"
    EV_TO_EBITDA = "ev_to_ebitda"
    BOOK_VALUE_PER_SHARE = "book_value_per_share"
    EARNINGS_PER_SHARE = "earnings_per_share"
    DILUTED_EPS = "diluted_eps"
    FREE_CASH_FLOW_YIELD = "free_cash_flow_yield"
    DIVIDEND_COVERAGE = "dividend_coverage"
    RETENTION_RATIO = "retention_ratio"
    # Cash flow
    FREE_CASH_FLOW = "free_cash_flow"
    CAPEX_COVERAGE = "capex_coverage"
    QUALITY_OF_EARNINGS = "quality_of_earnings"
    ACCRUALS_RATIO = "accruals_ratio"
    CASH_DIVIDEND_COVERAGE = "cash_dividend_coverage"
    # Intermediate
    FCFE = "fcfe"
    FCFF = "fcff"
    ROIC = "roic"
    CASH_CONVERSION_CYCLE = "cash_conversion_cycle"
    ASSET_QUALITY = "asset_quality"
    WORKING_CAPITAL_EFFICIENCY = "working_capital_efficiency"
    WORKING_CAPITAL_RATIO = "working_capital_ratio"
    CASH_FLOW_TO_DEBT = "cash_flow_to_debt"
    REVENUE_GROWTH = "revenue_growth"
    EARNINGS_GROWTH = "earnings_growth"
    ASSET_GROWTH = "asset_growth"
    SUSTAINABLE_GROWTH = "sustainable_growth"
    INTERNAL_GROWTH = "internal_growth"
    DEGREE_OF_OPERATING_LEVERAGE = "degree_of_operating_leverage"
    DEGREE_OF_FINANCIAL_LEVERAGE = "degree_of_financial_leverage"
    COMBINED_LEVERAGE = "combined_leverage"
    BREAK_EVEN_POINT = "break_even_point"
    MARGIN_OF_SAFETY = "margin_of_safety"
    # Risk
    ALTMAN_Z_SCORE = "altman_z_score"
    VALUE_AT_RISK = "value_at_risk"
    HISTORICAL_VAR = "historical_var"
    PARAMETRIC_VAR = "parametric_var"
    MONTE_CARLO_VAR = "monte_carlo_var"
    CONDITIONAL_VAR = "conditional_var"
    CREDIT_VAR = "credit_var"
    MONTE_CARLO_RISK = "monte_carlo_risk"
    # Advanced
    CAPM = "capm"
    ADJUSTED_BETA = "adjusted_beta"
    DCF = "dcf"
    DIVIDEND_DISCOUNT = "dividend_discount"
    WACC = "wacc"
    EVA = "eva"
    MVA = "mva"
    RESIDUAL_INCOME = "residual_income"
    TOTAL_SHAREHOLDER_RETURN = "total_shareholder_return"
    MACAULAY_DURATION = "macaulay_duration"
    MODIFIED_DURATION = "modified_duration"
    CONVEXITY = "convexity"
    CURRENT_YIELD = "current_yield"
    YIELD_TO_MATURITY = "yield_to_maturity"
    BLACK_SCHOLES = "black_scholes"
    BINOMIAL_OPTION = "binomial_option"
    AMERICAN_OPTION = "american_option"
    # Banking & insurance
    LOAN_TO_DEPOSIT = "loan_to_deposit"
    NON_PERFORMING_LOANS = "non_performing_loans"
    CAPITAL_ADEQUACY = "capital_adequacy"
    COMBINED_RATIO = "combined_ratio"
    LOSS_RATIO = "loss_ratio"
    EXPENSE_RATIO = "expense_ratio"


# (id, display name, calculator, aliases). Method is calculate_<id> on the calculator.
_CATALOGUE: Tuple[Tuple[MetricId, str, str, Tuple[str, ...]], ...] = (
    (MetricId.CURRENT_RATIO, "Current Ratio", "liquidity", ()),
    (MetricId.QUICK_RATIO, "Quick Ratio", "liquidity", ("Acid Test Ratio",)),
    (MetricId.CASH_RATIO, "Cash Ratio", "liquidity", ("Super Quick Ratio",)),
    (MetricId.WORKING_CAPITAL, "Working Capital", "liquidity", ()),
    (MetricId.NET_WORKING_CAPITAL_RATIO, "Net Working Capital Ratio", "liquidity", ()),
    (MetricId.OPERATING_CASH_FLOW_RATIO, "Operating Cash Flow Ratio", "liquidity", ()),
    (MetricId.DEFENSIVE_INTERVAL, "Defensive Interval Ratio", "liquidity", ()),
    (MetricId.CASH_COVERAGE, "Cash Coverage Ratio", "liquidity", ()),
    (MetricId.DAYS_CASH_ON_HAND, "Days Cash on Hand", "liquidity", ()),

    (MetricId.DEBT_TO_EQUITY, "Debt-to-Equity Ratio", "leverage", ("Debt to Equity Ratio",)),
    (MetricId.DEBT_RATIO, "Debt Ratio", "leverage", ()),
    (MetricId.EQUITY_RATIO, "Equity Ratio", "leverage", ()),
    (MetricId.INTEREST_COVERAGE, "Interest Coverage Ratio", "leverage", ("Times Interest Earned",)),
    (MetricId.LONG_TERM_DEBT_TO_EQUITY, "Long-term Debt to Equity", "leverage", ()),
    (MetricId.DEBT_TO_CAPITAL, "Debt-to-Capital Ratio", "leverage", ()),
    (MetricId.TOTAL_CAPITALIZATION, "Total Capitalization Ratio", "leverage", ("Capitalization Ratio",)),
    (MetricId.FIXED_CHARGE_COVERAGE, "Fixed Charge Coverage", "leverage", ()),
    (MetricId.DEBT_SERVICE_COVERAGE, "Debt Service Coverage", "leverage", ("Debt Coverage Ratio",)),
    (MetricId.EQUITY_MULTIPLIER, "Equity Multiplier", "leverage", ("Financial Leverage", "Financial Leverage Ratio")),
    (MetricId.DEBT_TO_EBITDA, "Debt-to-EBITDA Ratio", "leverage", ()),
    (MetricId.LONG_TERM_DEBT_RATIO, "Long-term Debt Ratio", "leverage", ()),
    (MetricId.SHORT_TERM_DEBT_RATIO, "Short-term Debt Ratio", "leverage", ()),

    (MetricId.ASSET_TURNOVER, "Asset Turnover", "activity", ()),
    (MetricId.FIXED_ASSET_TURNOVER, "Fixed Asset Turnover", "activity", ()),
    (MetricId.INVENTORY_TURNOVER, "Inventory Turnover", "activity", ()),
    (MetricId.RECEIVABLES_TURNOVER, "Receivables Turnover", "activity", ()),
    (MetricId.PAYABLES_TURNOVER, "Payables Turnover", "activity", ()),
    (MetricId.WORKING_CAPITAL_TURNOVER, "Working Capital Turnover", "activity", ("Gross Working Capital Turnover",)),
    (MetricId.CURRENT_ASSET_TURNOVER, "Current Asset Turnover", "activity", ()),
    (MetricId.CASH_TURNOVER, "Cash Turnover", "activity", ()),
    (MetricId.INVESTMENT_TURNOVER, "Investment Turnover", "activity", ("Total Capital Turnover",)),
    (MetricId.DAYS_SALES_OUTSTANDING, "Days Sales Outstanding", "activity", ()),
    (MetricId.DAYS_INVENTORY_OUTSTANDING, "Days Inventory Outstanding", "activity", ()),
    (MetricId.DAYS_PAYABLE_OUTSTANDING, "Days Payable Outstanding", "activity", ("Accounts Payable Period",)),
    (MetricId.REVENUE_PER_EMPLOYEE, "Sales per Employee", "activity", ("Employee Productivity", "Revenue per Employee")),
    (MetricId.PROFIT_PER_EMPLOYEE, "Profit per Employee", "activity", ()),

    (MetricId.GROSS_PROFIT_MARGIN, "Gross Profit Margin", "profitability", ()),
    (MetricId.OPERATING_PROFIT_MARGIN, "Operating Profit Margin", "profitability", ()),
    (MetricId.NET_PROFIT_MARGIN, "Net Profit Margin", "profitability", ()),
    (MetricId.PRETAX_PROFIT_MARGIN, "Pretax Profit Margin", "profitability", ()),
    (MetricId.RETURN_ON_ASSETS, "Return on Assets (ROA)", "profitability", ("Return on Assets", "ROA")),
    (MetricId.RETURN_ON_EQUITY, "Return on Equity (ROE)", "profitability", ("Return on Equity", "ROE")),
    (MetricId.OPERATING_RETURN_ON_ASSETS, "Operating Return on Assets", "profitability", ()),
    (MetricId.EBITDA, "EBITDA", "profitability", ()),
    (MetricId.EBITDA_MARGIN, "EBITDA Margin", "profitability", ()),
    (MetricId.EBIAT, "Earnings Before Interest After Taxes", "profitability", ("EBIAT",)),
    (MetricId.OPERATING_CASH_FLOW_MARGIN, "Operating Cash Flow Margin", "profitability", ()),
    (MetricId.CASH_RETURN_ON_ASSETS, "Cash Return on Assets", "profitability", ()),
    (MetricId.NET_PROFIT_MARGIN_AFTER_TAX, "Net Profit Margin After Tax", "profitability", ()),
    (MetricId.RETURN_ON_SALES, "Return on Sales", "profitability", ()),
    (MetricId.RETURN_ON_TOTAL_CAPITAL, "Return on Total Capital", "profitability", ()),
    (MetricId.RETURN_ON_COMMON_EQUITY, "Return on Common Equity", "profitability", ()),
    (MetricId.BASIC_EARNING_POWER, "Basic Earnings Power", "profitability", ()),
    (MetricId.OPERATING_EFFICIENCY, "Operating Efficiency Ratio", "profitability", ()),
    (MetricId.COGS_RATIO, "Cost of Goods Sold Ratio", "profitability", ()),
    (MetricId.SELLING_EXPENSE_RATIO, "Selling Expense Ratio", "profitability", ()),
    (MetricId.ADMINISTRATIVE_EXPENSE_RATIO, "Administrative Expense Ratio", "profitability", ()),
    (MetricId.INTEREST_EXPENSE_RATIO, "Interest Expense Ratio", "profitability", ()),
    (MetricId.TAX_EFFICIENCY, "Tax Efficiency Ratio", "profitability", ()),
    (MetricId.DUPONT_ROE, "DuPont ROE", "profitability", ("DuPont Analysis",)),

    (MetricId.PRICE_TO_EARNINGS, "Price-to-Earnings Ratio (P/E)", "market", ("P/E Ratio", "Price to Earnings Ratio")),
    (MetricId.PRICE_TO_BOOK, "Price-to-Book Ratio (P/B)", "market", ("P/B Ratio", "Price to Book Ratio")),
    (MetricId.MARKET_TO_BOOK, "Market-to-Book Ratio", "market", ()),
    (MetricId.DIVIDEND_YIELD, "Dividend Yield", "market", ()),
    (MetricId.DIVIDEND_PAYOUT, "Dividend Payout Ratio", "market", ()),
    (MetricId.PRICE_TO_SALES, "Price-to-Sales Ratio", "market", ()),
    (MetricId.PRICE_TO_CASH_FLOW, "Price-to-Cash Flow Ratio", "market", ()),
    (MetricId.EV_TO_EBITDA, "Enterprise Value to EBITDA", "market", ("EV/EBITDA",)),
    (MetricId.BOOK_VALUE_PER_SHARE, "Book Value per Share", "market", ()),
    (MetricId.EARNINGS_PER_SHARE, "Earnings per Share (EPS)", "market", ("Earnings per Share", "EPS")),
    (MetricId.DILUTED_EPS, "Diluted EPS", "market", ()),
    (MetricId.FREE_CASH_FLOW_YIELD, "Free Cash Flow Yield", "market", ()),
    (MetricId.DIVIDEND_COVERAGE, "Dividend Coverage Ratio", "market", ()),
    (MetricId.RETENTION_RATIO, "Retention Ratio", "market", ("Plowback Ratio",)),

    (MetricId.FREE_CASH_FLOW, "Free Cash Flow", "cash_flow", ()),
    (MetricId.CAPEX_COVERAGE, "Capital Expenditure Coverage", "cash_flow", ()),
    (MetricId.QUALITY_OF_EARNINGS, "Quality of Earnings", "cash_flow", ()),
    (MetricId.ACCRUALS_RATIO, "Accruals Ratio", "cash_flow", ()),
    (MetricId.CASH_DIVIDEND_COVERAGE, "Cash Coverage of Dividends", "cash_flow", ()),

    (MetricId.FCFE, "Free Cash Flow to Equity", "intermediate", ("FCFE",)),
    (MetricId.FCFF, "Free Cash Flow to Firm", "intermediate", ("FCFF",)),
    (MetricId.ROIC, "Return on Invested Capital", "intermediate", ("ROIC",)),
    (MetricId.CASH_CONVERSION_CYCLE, "Cash Conversion Cycle", "intermediate", ()),
    (MetricId.ASSET_QUALITY, "Asset Quality Ratio", "intermediate", ()),
    (MetricId.WORKING_CAPITAL_EFFICIENCY, "Working Capital Efficiency", "intermediate", ()),
    (MetricId.WORKING_CAPITAL_RATIO, "Working Capital Ratio", "intermediate", ()),
    (MetricId.CASH_FLOW_TO_DEBT, "Cash Flow to Debt Ratio", "intermediate", ()),
    (MetricId.REVENUE_GROWTH, "Revenue Growth Rate", "intermediate", ()),
    (MetricId.EARNINGS_GROWTH, "Earnings Growth Rate", "intermediate", ()),
    (MetricId.ASSET_GROWTH, "Asset Growth Rate", "intermediate", ()),
    (MetricId.SUSTAINABLE_GROWTH, "Sustainable Growth Rate", "intermediate", ()),
    (MetricId.INTERNAL_GROWTH, "Internal Growth Rate", "intermediate", ()),
    (MetricId.DEGREE_OF_OPERATING_LEVERAGE, "Degree of Operating Leverage", "intermediate", ("Operating Leverage",)),
    (MetricId.DEGREE_OF_FINANCIAL_LEVERAGE, "Degree of Financial Leverage", "intermediate", ()),
    (MetricId.COMBINED_LEVERAGE, "Combined Leverage", "intermediate", ()),
    (MetricId.BREAK_EVEN_POINT, "Break-even Analysis", "intermediate", ("Break-even Point",)),
    (MetricId.MARGIN_OF_SAFETY, "Margin of Safety", "intermediate", ()),

    (MetricId.ALTMAN_Z_SCORE, "Altman Z-Score", "risk", ()),
    (MetricId.VALUE_AT_RISK, "Value at Risk (VaR)", "risk", ("Value at Risk", "VaR")),
    (MetricId.HISTORICAL_VAR, "Historical VaR", "risk", ()),
    (MetricId.PARAMETRIC_VAR, "Parametric VaR", "risk", ()),
    (MetricId.MONTE_CARLO_VAR, "Monte Carlo VaR", "risk", ()),
    (MetricId.CONDITIONAL_VAR, "Conditional VaR", "risk", ("Expected Shortfall",)),
    (MetricId.CREDIT_VAR, "Credit VaR", "risk", ()),
    (MetricId.MONTE_CARLO_RISK, "Monte Carlo Risk Analysis", "risk", ()),

    (MetricId.CAPM, "Capital Asset Pricing Model", "valuation", ("CAPM",)),
    (MetricId.ADJUSTED_BETA, "Adjusted Beta", "valuation", ()),
    (MetricId.DCF, "Discounted Cash Flow Model", "valuation", ("DCF",)),
    (MetricId.DIVIDEND_DISCOUNT, "Dividend Discount Model", "valuation", ()),
    (MetricId.WACC, "Weighted Average Cost of Capital", "valuation", ("WACC",)),
    (MetricId.EVA, "Economic Value Added", "valuation", ("Economic Profit", "EVA")),
    (MetricId.MVA, "Market Value Added", "valuation", ("MVA",)),
    (MetricId.RESIDUAL_INCOME, "Residual Income", "valuation", ("Residual Income Model",)),
    (MetricId.TOTAL_SHAREHOLDER_RETURN, "Total Shareholder Return", "valuation", ()),
    (MetricId.MACAULAY_DURATION, "Macaulay Duration", "derivatives", ("Duration",)),
    (MetricId.MODIFIED_DURATION, "Modified Duration", "derivatives", ()),
    (MetricId.CONVEXITY, "Convexity", "derivatives", ()),
    (MetricId.CURRENT_YIELD, "Current Yield", "derivatives", ()),
    (MetricId.YIELD_TO_MATURITY, "Yield to Maturity", "derivatives", ()),
    (MetricId.BLACK_SCHOLES, "Black-Scholes Option Pricing", "derivatives", ("European Option Pricing",)),
    (MetricId.BINOMIAL_OPTION, "Binomial Option Model", "derivatives", ()),
    (MetricId.AMERICAN_OPTION, "American Option Pricing", "derivatives", ()),

    (MetricId.LOAN_TO_DEPOSIT, "Loan-to-Deposit Ratio", "banking", ()),
    (MetricId.NON_PERFORMING_LOANS, "Non-Performing Loans Ratio", "banking", ()),
    (MetricId.CAPITAL_ADEQUACY, "Capital Adequacy Ratio", "banking", ()),
    (MetricId.COMBINED_RATIO, "Combined Ratio", "insurance", ()),
    (MetricId.LOSS_RATIO, "Loss Ratio", "insurance", ()),
    (MetricId.EXPENSE_RATIO, "Expense Ratio", "insurance", ()),
)


def normalize_metric_name(name: str) -> str:
    """Case- and whitespace-insensitive lookup key."""
    return re.sub(r"\s+", " ", str(name)).strip().casefold()


@dataclass(frozen=True)
class MetricDefinition:
    metric_id: MetricId
    display_name: str
    function: MetricFunction
    aliases: Tuple[str, ...] = ()


class MetricRegistry:
    """Read-only map from MetricId to its bound calculator method."""

    def __init__(self, definitions: Dict[MetricId, MetricDefinition]):
        self._definitions = dict(definitions)
        self._lookup: Dict[str, MetricId] = {}
        self.validate()

    @classmethod
    def build(cls, config: Optional[CalculationConfig] = None) -> 'MetricRegistry':
        calculators = {
            'liquidity': LiquidityCalculator(config),
            'leverage': LeverageCalculator(config),
            'activity': ActivityCalculator(config),
            'profitability': ProfitabilityCalculator(config),
            'market': MarketCalculator(config),
            'cash_flow': CashFlowCalculator(config),
            'intermediate': IntermediateCalculator(config),
            'risk': RiskCalculator(config),
            'valuation': ValuationCalculator(config),
            'derivatives': DerivativesCalculator(config),
            'banking': BankingCalculator(config),
            'insurance': InsuranceCalculator(config),
        }
        definitions: Dict[MetricId, MetricDefinition] = {}
        for metric_id, display_name, calculator_key, aliases in _CATALOGUE:
            calculator = calculators.get(calculator_key)
            method = getattr(calculator, f"calculate_{metric_id.value}", None)
            definitions[metric_id] = MetricDefinition(metric_id, display_name, method, aliases)
        return cls(definitions)

    def validate(self) -> None:
        """Every MetricId bound to a callable, and every lookup name unambiguous."""
        missing = [m.value for m in MetricId if m not in self._definitions]
        if missing:
            raise RuntimeError(f"Metric ids without a definition: {missing}")
        unbound = [m.value for m, d in self._definitions.items() if not callable(d.function)]
        if unbound:
            raise RuntimeError(f"Metric ids without a calculator method: {unbound}")

        lookup: Dict[str, MetricId] = {}
        for metric_id, definition in self._definitions.items():
            for name in (metric_id.value, definition.display_name, *definition.aliases):
                key = normalize_metric_name(name)
                existing = lookup.get(key)
                if existing is not None and existing != metric_id:
                    raise RuntimeError(f"Metric name '{name}' maps to both {existing.value} and {metric_id.value}")
                lookup[key] = metric_id
        self._lookup = lookup
        logger.debug("Metric registry validated", extra={"metrics": len(self._definitions), "names": len(lookup)})

    def resolve(self, name: str) -> Optional[MetricId]:
        if name is None:
            return None
        return self._lookup.get(normalize_metric_name(name))

    def is_supported(self, name: str) -> bool:
        return self.resolve(name) is not None

    def function(self, metric_id: MetricId) -> MetricFunction:
        return self._definitions[metric_id].function

    def definition(self, metric_id: MetricId) -> MetricDefinition:
        return self._definitions[metric_id]

    def display_names(self) -> List[str]:
        return [self._definitions[m].display_name for m in MetricId]

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, metric_id: MetricId) -> bool:
        return metric_id in self._definitions


# Built once at import; wiring errors surface here
DEFAULT_REGISTRY = MetricRegistry.build()
