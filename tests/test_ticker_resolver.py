from ticker_resolver import COMMON_TOKENS, DEFAULT_DICTIONARY, SymbolDictionary, resolve_ticker


def test_resolve_ticker_known_and_unknown():
    assert resolve_ticker("BTC") == "bitcoin"
    assert resolve_ticker("eth") == "ethereum"
    assert resolve_ticker(" sol ") == "solana"
    assert resolve_ticker("PEPE") is None
    assert resolve_ticker("") is None


def test_default_dictionary_collapses_duplicates_onto_first_position():
    assert COMMON_TOKENS.count("TRX") == 2
    assert DEFAULT_DICTIONARY.symbols.count("TRX") == 1
    assert DEFAULT_DICTIONARY.position("BTC") == 0
    assert DEFAULT_DICTIONARY.position("TRX") == COMMON_TOKENS.index("TRX")
    assert len(DEFAULT_DICTIONARY) == len(set(COMMON_TOKENS))


def test_aliases_share_a_coin_id():
    assert DEFAULT_DICTIONARY.resolve("ONE") == DEFAULT_DICTIONARY.resolve("HARMONY") == "harmony"


def test_custom_dictionary_declared_but_unresolvable(small_dictionary):
    assert "ZZZ" in small_dictionary
    assert small_dictionary.resolve("ZZZ") is None
    assert small_dictionary.position("ZZZ") == 2
    assert "PEPE" not in small_dictionary
    assert small_dictionary.position("PEPE") is None
    assert list(small_dictionary) == ["BTC", "ETH", "ZZZ", "BETA", "SOL"]


def test_dictionary_is_read_only():
    dictionary = SymbolDictionary(["btc"], {"btc": "bitcoin"})

    assert dictionary.symbols == ("BTC",)
    try:
        dictionary.coin_ids["ETH"] = "ethereum"
    except TypeError:
        pass
    else:
        raise AssertionError("coin_ids should not accept writes")


def test_resolve_ticker_with_explicit_dictionary(small_dictionary):
    assert resolve_ticker("BETA", small_dictionary) == "beta-finance"
    assert resolve_ticker("DOGE", small_dictionary) is None
