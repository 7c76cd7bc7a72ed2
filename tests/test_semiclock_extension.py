##################################################
# Define a set of unit tests for the Inkscape    #
# semi-circular progress clock extension.        #
##################################################

from semiclock.semicircular_progress_clock import ActivationMode, \
    ColorOptions, SemiCircularProgressClock
from inkex.tester import InkscapeExtensionTestMixin, TestCase
from unittest.mock import patch
from io import BytesIO, StringIO
import inkex


class SemiClockBasicTest(InkscapeExtensionTestMixin, TestCase):
    'Run the extension with its default settings.'
    effect_class = SemiCircularProgressClock


class SemiClockCmdlineArgsTest(TestCase):
    effect_class = SemiCircularProgressClock

    def test_argparse_defaults(self):
        effect = self.effect_class()
        effect.parse_arguments([self.empty_svg])
        opts = effect.options
        assert opts.canvas_width == 400
        assert opts.percentage == 0
        assert opts.rect_width == 4
        assert opts.rect_height == 8
        assert opts.count == 27
        assert opts.fill == 'gray'
        assert opts.active_fill == 'red'
        assert opts.range_type == 'closest'
        assert opts.overflow == 'none'
        assert opts.verbose is False

    def test_clock_options(self):
        effect = self.effect_class()
        effect.parse_arguments([self.empty_svg,
                                '--canvas-width=700',
                                '--percentage=55.5',
                                '--count=9',
                                '--active-fill=blue',
                                '--range-type=range',
                                '--overflow=visible'])
        clock = effect.clock_options()
        assert clock.canvas_width == 700
        assert clock.percentage == 55.5
        assert clock.rectangle.count == 9
        assert clock.rectangle.colors == ColorOptions('gray', 'blue')
        assert clock.range_type is ActivationMode.RANGE
        assert clock.overflow == 'visible'

    def test_no_overflow(self):
        effect = self.effect_class()
        effect.parse_arguments([self.empty_svg])
        assert effect.clock_options().overflow is None

    @patch('sys.stderr', new_callable=StringIO)
    def test_argparse_bad_range_type(self, _stderr):
        effect = self.effect_class()
        with self.assertRaises(SystemExit):
            effect.parse_arguments([self.empty_svg, '--range-type=nearest'])


class SemiClockEffectTest(TestCase):
    'Draw clocks into documents.'
    effect_class = SemiCircularProgressClock

    def run_effect(self, *args, svg_file=None):
        'Run the extension and return it for inspection.'
        if svg_file is None:
            svg_file = self.empty_svg
        effect = self.effect_class()
        effect.run([svg_file] + list(args), output=BytesIO())
        return effect

    def clock_in_layer(self, effect):
        'Return the group the extension appended to the current layer.'
        layer = effect.svg.getElementById('layer1')
        groups = [g for g in layer if isinstance(g, inkex.Group)]
        assert len(groups) == 1
        return groups[0]

    def test_default_clock(self):
        grp = self.clock_in_layer(self.run_effect())
        rects = list(grp)
        assert len(rects) == 27
        assert all([r.get('style') == 'fill:gray' for r in rects])
        assert grp.get('clip-path') is None
        assert grp.get('overflow') is None

    def test_closest(self):
        grp = self.clock_in_layer(self.run_effect('--count=4',
                                                  '--percentage=40'))
        assert [r.get('style') for r in grp] == \
            ['fill:gray', 'fill:red', 'fill:gray', 'fill:gray']

    def test_range(self):
        grp = self.clock_in_layer(self.run_effect('--count=4',
                                                  '--percentage=60',
                                                  '--range-type=range',
                                                  '--active-fill=blue'))
        assert [r.get('style') for r in grp] == \
            ['fill:blue', 'fill:blue', 'fill:blue', 'fill:gray']

    def test_position(self):
        grp = self.clock_in_layer(self.run_effect('--position-x=10',
                                                  '--position-y=20'))
        pt = grp.transform.apply_to_point((0, 0))
        self.assertAlmostEqual(pt.x, 10)
        self.assertAlmostEqual(pt.y, 20)

    def test_overflow_hidden(self):
        effect = self.run_effect('--overflow=hidden', '--canvas-width=300')
        grp = self.clock_in_layer(effect)
        assert grp.get('overflow') == 'hidden'
        url = grp.get('clip-path')
        assert url.startswith('url(#') and url.endswith(')')
        clip = effect.svg.getElementById(url[5:-1])
        assert isinstance(clip, inkex.ClipPath)
        box = clip[0]
        assert box.get('width') == '300'
        assert box.get('height') == '158'

    def test_overflow_visible(self):
        grp = self.clock_in_layer(self.run_effect('--overflow=visible'))
        assert grp.get('overflow') == 'visible'
        assert grp.get('clip-path') is None

    def test_no_layers(self):
        effect = self.run_effect('--count=3',
                                 svg_file=self.data_file('svg',
                                                         'no-layers.svg'))
        groups = [g for g in effect.svg if isinstance(g, inkex.Group)]
        assert len(groups) == 1
        assert len(groups[0]) == 3

    @patch('sys.stderr', new_callable=StringIO)
    def test_verbose(self, _stderr):
        self.run_effect('--count=4', '--percentage=40', '--verbose=true')
        output = _stderr.getvalue()
        assert 'canvas: 400 x 208' in output
        assert 'arc: center (200, 208), radius 196' in output
        assert 'closest at 40%: [1]' in output

    @patch('sys.stderr', new_callable=StringIO)
    def test_quiet(self, _stderr):
        self.run_effect('--count=4', '--percentage=40')
        assert 'canvas:' not in _stderr.getvalue()

    @patch('sys.stderr', new_callable=StringIO)
    def test_too_few_ticks(self, _stderr):
        with self.assertRaises(SystemExit):
            self.run_effect('--count=1')
        assert 'at least two ticks' in _stderr.getvalue()
