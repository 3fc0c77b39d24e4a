from pocket_fx import Currency, PocketFx

print(PocketFx.__version__)  # 0.1.0

# Default usage: kursi.ge quotes, 5s timeout, 1h cache (override with POCKET_FX_* variables)
fx = PocketFx()

# Rate and conversion between any two supported currencies
print(fx.rate("USD", "GEO"))
print(fx.convert(100, Currency.EUR, Currency.USD))

# Which tier of the ladder answered (live_direct, fallback_inverse, last_resort, ...)
resolution = fx.resolve("EUR", "GEO")
print(resolution.tier.value, resolution.rate)

# Cache housekeeping
print(fx.cache_age())  # => seconds since the last successful fetch
fx.clear_cache()

fx.close()
