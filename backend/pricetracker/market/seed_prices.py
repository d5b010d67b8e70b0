"""Seed prices and per-symbol parameters for the offline feed simulator."""

# Rough mid prices for the default registry (USDT quote)
SEED_PRICES: dict[str, float] = {
    "BTCUSDT": 50000.00,
    "ETHUSDT": 3000.00,
    "BNBUSDT": 550.00,
    "XRPUSDT": 0.55,
    "ADAUSDT": 0.45,
    "SOLUSDT": 140.00,
    "DOGEUSDT": 0.12,
    "TRXUSDT": 0.12,
    "DOTUSDT": 6.50,
    "LTCUSDT": 80.00,
    "LINKUSDT": 14.00,
    "AVAXUSDT": 30.00,
    "ATOMUSDT": 8.00,
    "XLMUSDT": 0.10,
    "ETCUSDT": 25.00,
    "BCHUSDT": 400.00,
    "UNIUSDT": 7.00,
    "FILUSDT": 5.00,
    "NEARUSDT": 5.50,
    "SHIBUSDT": 0.000018,
}

# Per-symbol GBM parameters
# sigma: annualized volatility, mu: annualized drift
SYMBOL_PARAMS: dict[str, dict[str, float]] = {
    "BTCUSDT": {"sigma": 0.55, "mu": 0.10},
    "ETHUSDT": {"sigma": 0.70, "mu": 0.10},
    "BNBUSDT": {"sigma": 0.65, "mu": 0.08},
    "DOGEUSDT": {"sigma": 1.10, "mu": 0.05},  # Meme coin
    "SHIBUSDT": {"sigma": 1.20, "mu": 0.05},  # Meme coin
}

# Default parameters for symbols not listed above
DEFAULT_PARAMS: dict[str, float] = {"sigma": 0.85, "mu": 0.05}

# Correlation groups for the simulator's Cholesky decomposition
CORRELATION_GROUPS: dict[str, set[str]] = {
    "majors": {"BTCUSDT", "ETHUSDT", "BNBUSDT"},
    "memes": {"DOGEUSDT", "SHIBUSDT"},
}

INTRA_MAJORS_CORR = 0.8  # Majors track BTC closely
INTRA_MEMES_CORR = 0.6
CROSS_GROUP_CORR = 0.5  # Crypto moves together in general

# Relative half-spread applied around the simulated mid price
HALF_SPREAD = 0.0001  # 1 bp each side
