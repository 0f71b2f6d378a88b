from shopcompare.pricewatch import baseline_of, diff_prices, price_drops


def test_diff_prices(make_product):
    kept = make_product(name="kept", prices=(100,))
    cheaper = make_product(name="cheaper", prices=(80,))
    pricier = make_product(name="pricier", prices=(130,))
    tiny = make_product(name="tiny", prices=(99,))
    new = make_product(name="new", prices=(10,))
    previous = {
        kept.id: 100.0,
        cheaper.id: 100.0,
        pricier.id: 100.0,
        tiny.id: 100.0,
        "gone-b": 5.0,
        "gone-a": 5.0,
    }

    added, removed, changes = diff_prices(previous, [kept, cheaper, pricier, tiny, new], threshold=5)
    assert added == [new]
    assert removed == ["gone-a", "gone-b"]
    assert changes == [(cheaper, 100.0, 80), (pricier, 100.0, 130)]
    assert price_drops(changes) == [(cheaper, 100.0, 80)]


def test_unknown_or_zero_baseline_is_always_reported(make_product):
    a = make_product(prices=(10,))
    b = make_product(prices=(10,))
    _, _, changes = diff_prices({a.id: None, b.id: 0.0}, [a, b], threshold=50)
    assert changes == [(a, None, 10), (b, 0.0, 10)]
    assert price_drops(changes) == []


def test_baseline_of(make_product):
    p = make_product(prices=(30, 20))
    assert baseline_of([p]) == {p.id: 20}
