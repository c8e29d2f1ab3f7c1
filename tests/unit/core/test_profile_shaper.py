from tierlookup.core.services.profile_shaper import ProfileShaper, record_timestamp, shape_gamemodes, sort_tests


def test_shape_maps_fields(raw_profile):
    profile = ProfileShaper().shape(raw_profile)

    assert profile.id == raw_profile['uuid']
    assert profile.name == "Notch"
    assert profile.region == "EU"
    assert profile.score == 120
    assert profile.overall == 42
    assert profile.profile_url == "https://mctiers.com/player/Notch"
    assert profile.avatar_url == f"https://crafatar.com/avatars/{raw_profile['uuid']}?size=64&overlay=true"


def test_gamemodes_sorted_by_slug(raw_profile):
    profile = ProfileShaper().shape(raw_profile)

    assert [g['slug'] for g in profile.gamemodes] == ["axe", "nethop", "sword"]
    assert profile.gamemodes[2] == {
        'slug': "sword", 'tier': 2, 'pos': 0, 'peak_tier': 1, 'peak_pos': 1, 'retired': False
    }


def test_tests_sorted_newest_first_and_first_test_is_oldest(raw_profile):
    profile = ProfileShaper().shape(raw_profile)

    assert [t['at'] for t in profile.tests] == [1_700_000_300, 1_700_000_100, 1_700_000_000]
    assert profile.first_test == {"at": 1_700_000_000, "gamemode": "nethop", "tier": 5, "pos": 1}


def test_missing_sections_shape_to_empty(raw_profile):
    del raw_profile['rankings']
    raw_profile['tests'] = None

    profile = ProfileShaper().shape(raw_profile)

    assert profile.gamemodes == []
    assert profile.tests == []
    assert profile.first_test is None


def test_helpers_ignore_malformed_input():
    assert shape_gamemodes(["sword"]) == []
    assert shape_gamemodes({"sword": None}) == [{'slug': "sword"}]
    assert sort_tests({"at": 1}) == []
    assert sort_tests([{"at": 2}, "junk", {"at": 5}]) == [{"at": 5}, {"at": 2}]


def test_custom_urls(raw_profile):
    shaper = ProfileShaper(profile_base_url="http://site/p/", avatar_base_url="http://img", avatar_size=32)
    raw_profile['name'] = "Some One"

    profile = shaper.shape(raw_profile)

    assert profile.profile_url == "http://site/p/Some%20One"
    assert profile.avatar_url.startswith("http://img/")
    assert profile.avatar_url.endswith("?size=32&overlay=true")


def test_to_dict_uses_wire_names_and_round_trips(raw_profile):
    profile = ProfileShaper().shape(raw_profile)
    data = profile.to_dict()

    assert set(data) == {
        "id", "name", "region", "score", "overall", "gamemodes", "tests", "firstTest", "avatarUrl", "profileUrl"
    }
    assert type(profile).from_dict(data) == profile


def test_mixed_timestamp_types_sort_numerically():
    tests = [{"at": "1700000200"}, {"at": 1_700_000_100}, {"at": "bogus"}, {"at": 1_700_000_300.5}, {}]

    ordered = sort_tests(tests)

    assert ordered == [{"at": 1_700_000_300.5}, {"at": "1700000200"}, {"at": 1_700_000_100}, {"at": "bogus"}, {}]


def test_record_timestamp():
    assert record_timestamp({"at": 5}) == 5.0
    assert record_timestamp({"at": "7.5"}) == 7.5
    assert record_timestamp({"at": "later"}) == 0.0
    assert record_timestamp({"at": None}) == 0.0
    assert record_timestamp({}) == 0.0
