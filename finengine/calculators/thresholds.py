"""Threshold tables for every metric in the library.

Tables are pure data. Each tuple is (label, min, max) with inclusive bounds;
None means unbounded. Declaration order decides shared boundaries.
Margin and percentage metrics are classified on the fraction (0.15, not 15)
unless the table name says otherwise.
"""
from finengine.calculators.classification import ThresholdTable

T = ThresholdTable.build

# --- Generic vocabularies
CALCULATED = T('calculated', ('calculated', None, None))
SIGN = T('sign', ('positive', 0, None), ('negative', None, 0))
VALUE_CREATION = T('value_creation', ('value_destroying', None, 0), ('value_creating', 0, None))
EARNINGS_SIGN = T('earnings_sign', ('loss_making', None, 0), ('profitable', 0, None))
OPTION_VALUE = T('option_value', ('worthless', None, 0), ('valuable', 0, None))
VALUATION_SIGN = T('valuation_sign', ('negative', None, 0), ('positive', 0, None))

# --- Liquidity
CURRENT_RATIO = T('current_ratio',
                  ('excellent', 2.5, None), ('good', 1.5, 2.5), ('average', 1.0, 1.5), ('poor', None, 1.0))
QUICK_RATIO = T('quick_ratio',
                ('excellent', 1.5, None), ('good', 1.0, 1.5), ('average', 0.7, 1.0), ('poor', None, 0.7))
CASH_RATIO = T('cash_ratio',
               ('excellent', 0.5, None), ('good', 0.3, 0.5), ('average', 0.1, 0.3), ('poor', None, 0.1))
WORKING_CAPITAL = T('working_capital', ('good', 0, None), ('concerning', None, 0))
OPERATING_CASH_FLOW_RATIO = T('operating_cash_flow_ratio',
                              ('excellent', 0.4, None), ('good', 0.25, 0.4), ('average', 0.15, 0.25),
                              ('poor', None, 0.15))
WORKING_CAPITAL_TO_ASSETS = T('working_capital_to_assets',
                              ('excellent', 0.2, None), ('good', 0.1, 0.2), ('average', 0.05, 0.1),
                              ('poor', None, 0.05))
NET_WORKING_CAPITAL_TO_ASSETS = T('net_working_capital_to_assets',
                                  ('excellent', 0.2, None), ('good', 0.1, 0.2), ('average', 0, 0.1),
                                  ('poor', None, 0))
DEFENSIVE_INTERVAL_DAYS = T('defensive_interval_days',
                            ('excellent', 90, None), ('good', 60, 90), ('average', 30, 60), ('poor', None, 30))
DAYS_CASH_ON_HAND = T('days_cash_on_hand',
                      ('excellent', 180, None), ('good', 90, 180), ('average', 30, 90), ('poor', None, 30))

# --- Leverage & coverage
DEBT_TO_EQUITY = T('debt_to_equity',
                   ('low', None, 0.3), ('moderate', 0.3, 0.6), ('high', 0.6, 1.0), ('very_high', 1.0, None))
DEBT_RATIO = T('debt_ratio',
               ('low', None, 0.3), ('moderate', 0.3, 0.5), ('high', 0.5, 0.7), ('very_high', 0.7, None))
EQUITY_RATIO = T('equity_ratio',
                 ('excellent', 0.7, None), ('good', 0.5, 0.7), ('average', 0.3, 0.5), ('poor', None, 0.3))
INTEREST_COVERAGE = T('interest_coverage',
                      ('excellent', 8, None), ('good', 4, 8), ('average', 2, 4), ('poor', None, 2))
LONG_TERM_DEBT_TO_EQUITY = T('long_term_debt_to_equity',
                             ('low', None, 0.3), ('moderate', 0.3, 0.6), ('high', 0.6, None))
CAPITALIZATION = T('capitalization', ('low', None, 0.3), ('moderate', 0.3, 0.5), ('high', 0.5, None))
FIXED_CHARGE_COVERAGE = T('fixed_charge_coverage',
                          ('excellent', 3, None), ('good', 2, 3), ('average', 1.5, 2), ('poor', None, 1.5))
DEBT_SERVICE_COVERAGE = T('debt_service_coverage',
                          ('excellent', 2.5, None), ('good', 1.5, 2.5), ('average', 1.0, 1.5), ('poor', None, 1.0))
EQUITY_MULTIPLIER = T('equity_multiplier',
                      ('conservative', None, 2), ('moderate', 2, 4), ('aggressive', 4, None))
DEBT_TO_EBITDA = T('debt_to_ebitda',
                   ('low', None, 2), ('moderate', 2, 3.5), ('high', 3.5, 5), ('very_high', 5, None))
LONG_TERM_DEBT_RATIO = T('long_term_debt_ratio', ('low', None, 0.2), ('moderate', 0.2, 0.4), ('high', 0.4, None))
SHORT_TERM_DEBT_SHARE = T('short_term_debt_share', ('low', None, 0.3), ('moderate', 0.3, 0.6), ('high', 0.6, None))
CASH_FLOW_TO_DEBT = T('cash_flow_to_debt',
                      ('excellent', 0.4, None), ('good', 0.25, 0.4), ('average', 0.15, 0.25), ('poor', None, 0.15))

# --- Activity
ASSET_TURNOVER = T('asset_turnover',
                   ('excellent', 2.0, None), ('good', 1.5, 2.0), ('average', 1.0, 1.5), ('poor', None, 1.0))
FIXED_ASSET_TURNOVER = T('fixed_asset_turnover',
                         ('excellent', 4, None), ('good', 2, 4), ('average', 1, 2), ('poor', None, 1))
INVENTORY_TURNOVER = T('inventory_turnover',
                       ('excellent', 12, None), ('good', 8, 12), ('average', 4, 8), ('poor', None, 4))
RECEIVABLES_TURNOVER = T('receivables_turnover',
                         ('excellent', 12, None), ('good', 8, 12), ('average', 4, 8), ('poor', None, 4))
# Above 12 the company pays suppliers unusually fast; left unclassified
PAYABLES_TURNOVER = T('payables_turnover',
                      ('excellent', 6, 12), ('good', 4, 6), ('average', 2, 4), ('poor', None, 2))
WORKING_CAPITAL_TURNOVER = T('working_capital_turnover',
                             ('excellent', 8, None), ('good', 5, 8), ('average', 3, 5), ('poor', None, 3))
CURRENT_ASSET_TURNOVER = T('current_asset_turnover',
                           ('excellent', 3, None), ('good', 2, 3), ('average', 1, 2), ('poor', None, 1))
CASH_TURNOVER = T('cash_turnover',
                  ('excellent', 10, None), ('good', 6, 10), ('average', 3, 6), ('poor', None, 3))
INVESTMENT_TURNOVER = T('investment_turnover',
                        ('excellent', 3, None), ('good', 2, 3), ('average', 1, 2), ('poor', None, 1))
DAYS_SALES_OUTSTANDING = T('days_sales_outstanding',
                           ('excellent', None, 30), ('good', 30, 45), ('average', 45, 60), ('poor', 60, None))
DAYS_INVENTORY_OUTSTANDING = T('days_inventory_outstanding',
                               ('excellent', None, 30), ('good', 30, 60), ('average', 60, 90), ('poor', 90, None))
DAYS_PAYABLE_OUTSTANDING = T('days_payable_outstanding',
                             ('excellent', 60, None), ('good', 45, 60), ('average', 30, 45), ('poor', None, 30))

# --- Profitability
GROSS_MARGIN = T('gross_margin',
                 ('excellent', 0.4, None), ('good', 0.25, 0.4), ('average', 0.15, 0.25), ('poor', None, 0.15))
OPERATING_MARGIN = T('operating_margin',
                     ('excellent', 0.15, None), ('good', 0.10, 0.15), ('average', 0.05, 0.10), ('poor', None, 0.05))
NET_MARGIN = T('net_margin',
               ('excellent', 0.10, None), ('good', 0.05, 0.10), ('average', 0.02, 0.05), ('poor', None, 0.02))
RETURN_ON_ASSETS = T('return_on_assets',
                     ('excellent', 0.15, None), ('good', 0.10, 0.15), ('average', 0.05, 0.10), ('poor', None, 0.05))
RETURN_ON_EQUITY = T('return_on_equity',
                     ('excellent', 0.20, None), ('good', 0.15, 0.20), ('average', 0.10, 0.15), ('poor', None, 0.10))
OPERATING_RETURN_ON_ASSETS = T('operating_return_on_assets',
                               ('excellent', 0.12, None), ('good', 0.08, 0.12), ('average', 0.04, 0.08),
                               ('poor', None, 0.04))
EBITDA_MARGIN = T('ebitda_margin',
                  ('excellent', 0.20, None), ('good', 0.15, 0.20), ('average', 0.10, 0.15), ('poor', None, 0.10))
NET_MARGIN_AFTER_TAX = T('net_margin_after_tax',
                         ('excellent', 0.08, None), ('good', 0.05, 0.08), ('average', 0.02, 0.05), ('poor', None, 0.02))
OPERATING_EXPENSE_RATIO = T('operating_expense_ratio',
                            ('excellent', None, 0.6), ('good', 0.6, 0.75), ('average', 0.75, 0.9), ('poor', 0.9, None))
COGS_RATIO = T('cogs_ratio',
               ('excellent', None, 0.6), ('good', 0.6, 0.75), ('average', 0.75, 0.85), ('poor', 0.85, None))
SELLING_EXPENSE_RATIO = T('selling_expense_ratio',
                          ('excellent', None, 0.1), ('good', 0.1, 0.2), ('average', 0.2, 0.3), ('poor', 0.3, None))
ADMINISTRATIVE_EXPENSE_RATIO = T('administrative_expense_ratio',
                                 ('excellent', None, 0.05), ('good', 0.05, 0.1), ('average', 0.1, 0.15),
                                 ('poor', 0.15, None))
INTEREST_EXPENSE_RATIO = T('interest_expense_ratio',
                           ('excellent', None, 0.02), ('good', 0.02, 0.05), ('average', 0.05, 0.1), ('poor', 0.1, None))
TAX_EFFICIENCY = T('tax_efficiency',
                   ('excellent', 0.85, None), ('good', 0.75, 0.85), ('average', 0.65, 0.75), ('poor', None, 0.65))

# --- Market
PRICE_TO_EARNINGS = T('price_to_earnings', ('undervalued', None, 15), ('fair', 15, 25), ('overvalued', 25, None))
PRICE_TO_BOOK = T('price_to_book', ('undervalued', None, 1), ('fair', 1, 3), ('overvalued', 3, None))
PRICE_TO_SALES = T('price_to_sales', ('undervalued', None, 1), ('fair', 1, 3), ('overvalued', 3, None))
PRICE_TO_CASH_FLOW = T('price_to_cash_flow', ('undervalued', None, 10), ('fair', 10, 20), ('overvalued', 20, None))
EV_TO_EBITDA = T('ev_to_ebitda', ('undervalued', None, 8), ('fair', 8, 14), ('overvalued', 14, None))
DIVIDEND_YIELD = T('dividend_yield', ('high', 0.06, None), ('moderate', 0.03, 0.06), ('low', None, 0.03))
DIVIDEND_PAYOUT = T('dividend_payout', ('conservative', None, 0.3), ('moderate', 0.3, 0.6), ('high', 0.6, None))
FREE_CASH_FLOW_YIELD = T('free_cash_flow_yield', ('high', 0.08, None), ('moderate', 0.04, 0.08), ('low', None, 0.04))
DIVIDEND_COVERAGE = T('dividend_coverage', ('strong', 2, None), ('adequate', 1.5, 2), ('weak', None, 1.5))
RETENTION = T('retention', ('high', 0.6, None), ('moderate', 0.3, 0.6), ('low', None, 0.3))

# --- Cash flow
CAPEX_COVERAGE = T('capex_coverage',
                   ('excellent', 2, None), ('good', 1.5, 2), ('average', 1, 1.5), ('poor', None, 1))
EARNINGS_QUALITY = T('earnings_quality',
                     ('excellent', 1.2, None), ('good', 1.0, 1.2), ('average', 0.8, 1.0), ('poor', None, 0.8))
ACCRUALS = T('accruals', ('excellent', None, 0), ('good', 0, 0.05), ('average', 0.05, 0.1), ('poor', 0.1, None))

# --- Intermediate
FREE_CASH_FLOW_TO_EQUITY = T('free_cash_flow_to_equity',
                             ('cash_consuming', None, 0), ('positive_cash_generation', 0, None))
FREE_CASH_FLOW_TO_FIRM = T('free_cash_flow_to_firm', ('value_consuming', None, 0), ('value_generating', 0, None))
# Classified on the percentage value
ROIC_PERCENT = T('roic_percent',
                 ('excellent', 20, None), ('good', 15, 20), ('average', 10, 15), ('poor', None, 10))
CASH_CONVERSION_CYCLE = T('cash_conversion_cycle',
                          ('excellent', None, 30), ('good', 30, 60), ('needs_improvement', 60, None))
# Classified on the percentage value
ASSET_QUALITY_PERCENT = T('asset_quality_percent',
                          ('excellent', 80, None), ('good', 60, 80), ('average', 40, 60), ('poor', None, 40))
WORKING_CAPITAL_EFFICIENCY = T('working_capital_efficiency',
                               ('excellent', 5, None), ('good', 3, 5), ('needs_improvement', None, 3))
GROWTH_RATE = T('growth_rate', ('strong', 0.15, None), ('moderate', 0.05, 0.15), ('weak', 0, 0.05),
                ('declining', None, 0))
SUSTAINABLE_GROWTH = T('sustainable_growth', ('conservative', None, 0.1), ('moderate', 0.1, 0.2),
                       ('aggressive', 0.2, None))
INTERNAL_GROWTH = T('internal_growth', ('conservative', None, 0.05), ('moderate', 0.05, 0.15),
                    ('aggressive', 0.15, None))
OPERATING_LEVERAGE = T('operating_leverage', ('low', None, 2), ('moderate', 2, 4), ('high', 4, None))
FINANCIAL_LEVERAGE_DEGREE = T('financial_leverage_degree', ('low', None, 1.5), ('moderate', 1.5, 2.5),
                              ('high', 2.5, None))
COMBINED_LEVERAGE = T('combined_leverage', ('low', None, 3), ('moderate', 3, 8), ('high', 8, None))
MARGIN_OF_SAFETY = T('margin_of_safety', ('high', 0.25, None), ('moderate', 0.1, 0.25), ('low', None, 0.1))

# --- Risk
ALTMAN_Z = T('altman_z', ('safe', 2.99, None), ('caution', 1.81, 2.99), ('distress', None, 1.81))
VALUE_AT_RISK = T('value_at_risk', ('moderate_risk', None, 0.1), ('high_risk', 0.1, None))
SCENARIO_VOLATILITY = T('scenario_volatility', ('moderate_risk', None, 0.2), ('high_risk', 0.2, None))
CREDIT_LOSS = T('credit_loss', ('acceptable_risk', None, 0.05), ('high_risk', 0.05, None))

# --- Advanced
CAPM_RETURN = T('capm_return', ('moderate_risk', None, 0.15), ('high_risk', 0.15, None))
ADJUSTED_BETA = T('adjusted_beta', ('lower_than_market_risk', None, 1), ('higher_than_market_risk', 1, None))
WACC = T('wacc', ('low', None, 0.08), ('moderate', 0.08, 0.12), ('high', 0.12, None))
SHAREHOLDER_RETURN = T('shareholder_return', ('high', 0.15, None), ('moderate', 0, 0.15), ('negative', None, 0))
MACAULAY_DURATION = T('macaulay_duration', ('short', None, 3), ('medium', 3, 7), ('long', 7, None))
MODIFIED_DURATION = T('modified_duration', ('low_sensitivity', None, 5), ('high_sensitivity', 5, None))
CONVEXITY = T('convexity', ('negative_convexity', None, 0), ('positive_convexity', 0, None))
MONEYNESS = T('moneyness', ('at_the_money', 1, 1), ('in_the_money', 1, None), ('out_of_the_money', None, 1))
BOND_YIELD = T('bond_yield', ('high', 0.07, None), ('moderate', 0.04, 0.07), ('low', None, 0.04))

# --- Banking
LOAN_TO_DEPOSIT = T('loan_to_deposit', ('conservative', None, 0.7), ('moderate', 0.7, 0.9), ('aggressive', 0.9, None))
NON_PERFORMING_LOANS = T('non_performing_loans', ('excellent', None, 0.02), ('good', 0.02, 0.05),
                         ('concerning', 0.05, None))
CAPITAL_ADEQUACY = T('capital_adequacy', ('strong', 0.12, None), ('adequate', 0.08, 0.12), ('weak', None, 0.08))

# --- Insurance (combined ratio classified on the percentage value)
COMBINED_RATIO_PERCENT = T('combined_ratio_percent',
                           ('break_even', 100, 100), ('profitable', None, 100), ('unprofitable', 100, None))
LOSS_RATIO = T('loss_ratio', ('excellent', None, 0.6), ('good', 0.6, 0.8), ('concerning', 0.8, None))
EXPENSE_RATIO = T('expense_ratio', ('excellent', None, 0.25), ('good', 0.25, 0.35), ('concerning', 0.35, None))
