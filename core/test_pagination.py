from django.test import SimpleTestCase

from .pagination import MAX_LIMIT, build_envelope, get_pagination


class GetPaginationTests(SimpleTestCase):
    def test_defaults(self):
        p = get_pagination({})
        self.assertEqual((p.page, p.limit, p.skip), (1, 10, 0))

    def test_skip_follows_page(self):
        p = get_pagination({'page': '3', 'limit': '20'})
        self.assertEqual(p.skip, 40)

    def test_limit_is_capped(self):
        self.assertEqual(get_pagination({'limit': '500'}).limit, MAX_LIMIT)

    def test_invalid_values_fall_back(self):
        p = get_pagination({'page': 'abc', 'limit': 'lots'})
        self.assertEqual((p.page, p.limit), (1, 10))

    def test_zero_and_negative_are_clamped(self):
        self.assertEqual(get_pagination({'page': '0'}).page, 1)
        self.assertEqual(get_pagination({'page': '-4'}).page, 1)
        self.assertEqual(get_pagination({'limit': '-5'}).limit, 1)

    def test_leading_digits_are_used(self):
        self.assertEqual(get_pagination({'page': '2abc'}).page, 2)

    def test_custom_default(self):
        self.assertEqual(get_pagination({}, default_limit=30).limit, 30)


class BuildEnvelopeTests(SimpleTestCase):
    def test_first_of_three_pages(self):
        envelope = build_envelope({'data': list(range(10)), 'total': 25}, get_pagination({'page': '1'}))

        self.assertEqual(envelope['pagination'], {
            'total': 25,
            'page': 1,
            'limit': 10,
            'pages': 3,
            'hasNext': True,
            'hasPrev': False,
        })

    def test_last_page(self):
        envelope = build_envelope({'data': [1, 2, 3, 4, 5], 'total': 25}, get_pagination({'page': '3'}))
        self.assertFalse(envelope['pagination']['hasNext'])
        self.assertTrue(envelope['pagination']['hasPrev'])

    def test_empty_result(self):
        envelope = build_envelope({'data': [], 'total': 0}, get_pagination({}))
        self.assertEqual(envelope['pagination']['pages'], 0)
        self.assertFalse(envelope['pagination']['hasNext'])

    def test_other_payloads_pass_through(self):
        pagination = get_pagination({})
        self.assertEqual(build_envelope({'success': True}, pagination), {'success': True})
        self.assertEqual(build_envelope({'data': [], 'total': True}, pagination), {'data': [], 'total': True})
        self.assertEqual(build_envelope([1, 2], pagination), [1, 2])
