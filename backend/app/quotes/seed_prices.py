"""Seed quotes and per-symbol parameters for the offline quote simulator."""

# Display name and a realistic reference level for the default watch-list
# and a few common constituents (as of project creation)
SEED_QUOTES: dict[str, tuple[str, float]] = {
    "sh000001": ("上证指数", 3050.00),
    "sz399001": ("深证成指", 9600.00),
    "sz399006": ("创业板指", 1900.00),
    "sh000300": ("沪深300", 3550.00),
    "sh600519": ("贵州茅台", 1600.00),
    "sh600000": ("浦发银行", 8.50),
    "sh601318": ("中国平安", 45.00),
    "sz000001": ("平安银行", 11.00),
    "sz000858": ("五粮液", 140.00),
    "sz300750": ("宁德时代", 190.00),
}

# Per-symbol GBM parameters
# sigma: annualized volatility (higher = more price movement)
# mu: annualized drift / expected return
SYMBOL_PARAMS: dict[str, dict[str, float]] = {
    "sh000001": {"sigma": 0.15, "mu": 0.03},
    "sz399001": {"sigma": 0.20, "mu": 0.03},
    "sz399006": {"sigma": 0.30, "mu": 0.04},  # Growth board, more volatile
    "sh000300": {"sigma": 0.17, "mu": 0.03},
    "sz300750": {"sigma": 0.45, "mu": 0.06},
}

# Default parameters for symbols not listed above
DEFAULT_PARAMS: dict[str, float] = {"sigma": 0.30, "mu": 0.05}

# Range for the random seed price of an unknown symbol
UNKNOWN_PRICE_RANGE = (5.0, 100.0)

# Correlation coefficients
SAME_MARKET_CORR = 0.6  # Same exchange moves together
CROSS_MARKET_CORR = 0.3  # Shanghai vs Shenzhen
