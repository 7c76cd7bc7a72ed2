#! /usr/bin/env python

'''
Copyright (C) 2023 The semiclock developers

This program is free software; you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation; either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program; if not, write to the Free Software
Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA
02110-1301, USA.
'''

import collections
import collections.abc
import enum
import math
import lxml.etree
import inkex
from inkex.localization import inkex_gettext as _


# ----------------------------------------------------------------------

# The following variable, class, and function definitions are utilized by
# the layout engine, the activation policies, and the SVG output code.

# Ticks are drawn in these colors unless the caller says otherwise.
DEFAULT_FILL = 'gray'
DEFAULT_ACTIVE_FILL = 'red'

# Define the values accepted for a clock's overflow attribute.
OVERFLOW_VALUES = ('hidden', 'visible')

# Define a minimal standalone SVG document to which ticks are appended.
_svg_template = '<svg xmlns="http://www.w3.org/2000/svg" ' \
                'width="%s" height="%s"/>'


class ConfigurationError(inkex.AbortExtension):
    'Indicate that a clock cannot be drawn with the given parameters.'


def _abend(msg):
    'Abnormally end execution with an error message.'
    raise ConfigurationError(msg)


def _debug_print(*args):
    'Implement print in terms of inkex.utils.debug.'
    inkex.utils.debug(' '.join([str(a) for a in args]))


def _python_to_svg_str(val):
    'Convert a Python value to a string suitable for use in an SVG attribute.'
    if isinstance(val, str):
        # Strings are used unmodified.
        return val
    if isinstance(val, float):
        # Floats are converted using a fair number of significant digits.
        return '%.10g' % val
    return str(val)  # Everything else is converted to a string as usual.


def _floor(val):
    '''Round a number down to an integer but pass infinities and NaNs
    through unmodified.'''
    if math.isfinite(val):
        return math.floor(val)
    return val


# ----------------------------------------------------------------------

# The following classes represent a clock's configuration and geometry.

class ColorOptions(collections.namedtuple('ColorOptions',
                                          ['fill', 'active_fill'],
                                          defaults=[DEFAULT_FILL,
                                                    DEFAULT_ACTIVE_FILL])):
    'Name the colors of inactive and active ticks.'
    __slots__ = ()

    @classmethod
    def from_value(cls, colors):
        '''Convert None, a ColorOptions, or a mapping with "fill" and
        "activeFill" (or "active_fill") keys to a ColorOptions.  Missing
        colors fall back to the defaults.'''
        if colors is None:
            return cls()
        if isinstance(colors, cls):
            return colors
        if not isinstance(colors, collections.abc.Mapping):
            _abend(_('Unexpected colors argument %s') % repr(colors))
        fill = colors.get('fill')
        active_fill = colors.get('active_fill', colors.get('activeFill'))
        if fill is None:
            fill = DEFAULT_FILL
        if active_fill is None:
            active_fill = DEFAULT_ACTIVE_FILL
        return cls(fill, active_fill)


class RectangleOptions(collections.namedtuple('RectangleOptions',
                                              ['width', 'height', 'count',
                                               'colors'])):
    'Describe the size, number, and colors of the tick rectangles.'
    __slots__ = ()

    def __new__(cls, width, height, count, colors=None):
        return super().__new__(cls, width, height, count,
                               ColorOptions.from_value(colors))


class ArcConfiguration():
    '''Represent the geometry derived from a clock's canvas width.  The
    canvas height, the arc radius, and the arc center are computed once,
    here, and cannot be assigned independently.'''

    def __init__(self, canvas_width, tick_height):
        self._width = canvas_width
        self._tick_height = tick_height
        self._height = canvas_width/2 + tick_height
        self._radius = canvas_width/2 - tick_height/2
        self._center = (canvas_width/2, self._height)

    def __repr__(self):
        return 'ArcConfiguration(%r, %r)' % (self._width, self._tick_height)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return (self._width, self._tick_height) == \
            (other._width, other._tick_height)

    def __hash__(self):
        return hash((self._width, self._tick_height))

    @property
    def width(self):
        'Return the canvas width.'
        return self._width

    @property
    def height(self):
        'Return the canvas height, which leaves room for the ticks.'
        return self._height

    @property
    def radius(self):
        'Return the radius of the circle passing through the tick centers.'
        return self._radius

    @property
    def center(self):
        'Return the center of the arc as an (x, y) tuple.'
        return self._center

    @property
    def tick_height(self):
        'Return the tick height from which the geometry was derived.'
        return self._tick_height


class Tick(collections.namedtuple('Tick',
                                  ['index', 'center', 'angle', 'percentage',
                                   'width', 'height', 'fill',
                                   'active_fill'])):
    'Represent one tick mark placed on the arc.'
    __slots__ = ()

    @property
    def x(self):
        "Return the x coordinate of the tick's upper-left corner."
        return self.center[0] - self.width/2

    @property
    def y(self):
        "Return the y coordinate of the tick's upper-left corner."
        return self.center[1] - self.height/2

    @property
    def rotation(self):
        '''Return an SVG transform string that rotates the tick around its
        own center.'''
        return 'rotate(%s,%s,%s)' % (_python_to_svg_str(self.angle),
                                     _python_to_svg_str(self.center[0]),
                                     _python_to_svg_str(self.center[1]))

    @property
    def transform(self):
        "Return the tick's rotation as an inkex.Transform."
        tr = inkex.Transform()
        tr.add_rotate(self.angle, self.center[0], self.center[1])
        return tr

    def color(self, active):
        'Return the fill color for an active or inactive tick.'
        if active:
            return self.active_fill
        return self.fill


# ----------------------------------------------------------------------

# The following classes and functions decide which ticks are active.

ActivationContext = collections.namedtuple('ActivationContext',
                                           ['percentages', 'percentage',
                                            'tick_percentage'])
ActivationContext.__doc__ = '''Hold everything an activation policy needs to
judge one tick: every tick's threshold in index order, the current
percentage, and the judged tick's threshold.'''


class ActivationPolicy():
    'Decide whether a tick is active.'

    def is_active(self, context):
        'Return True if the tick described by context should be filled.'
        raise NotImplementedError

    @staticmethod
    def _final_percentage(context):
        "Return the final tick's threshold."
        try:
            return context.percentages[-1]
        except IndexError:
            _abend(_('Activation requires at least one tick.'))


class ClosestPolicy(ActivationPolicy):
    '''Activate only the tick whose threshold is the greatest one strictly
    below the current percentage, like the hand of a clock.  The final tick
    lights up once the percentage reaches 100.'''

    def is_active(self, context):
        pct = context.percentage
        tick_pct = context.tick_percentage
        if pct == 0:
            return False
        if tick_pct == self._final_percentage(context) and pct >= 100:
            return True

        # Thresholds never decrease so the last one below pct is the
        # greatest.  The final tick never takes part.
        closest = None
        for p in context.percentages[:-1]:
            if p < pct:
                closest = p
        return closest == tick_pct and pct < 100


class RangePolicy(ActivationPolicy):
    '''Activate every tick whose threshold has been reached, like a fuel
    gauge.  The final tick lights up only once the percentage reaches 100.'''

    def is_active(self, context):
        pct = context.percentage
        if pct == 0:
            return False
        if context.tick_percentage == self._final_percentage(context):
            return pct >= 100
        return _floor(pct) >= context.tick_percentage


class ActivationMode(enum.Enum):
    'Select the policy that decides which ticks are active.'
    CLOSEST = 'closest'
    RANGE = 'range'

    @classmethod
    def parse(cls, value):
        'Convert an ActivationMode or its name to an ActivationMode.'
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            _abend(_('Invalid range type "%s"') % str(value))

    @property
    def policy(self):
        'Return the ActivationPolicy that implements this mode.'
        return _policies[self]


_policies = {
    ActivationMode.CLOSEST: ClosestPolicy(),
    ActivationMode.RANGE: RangePolicy()
}


def is_active(mode, all_percentages, percentage, tick_percentage):
    '''Return True if a tick with threshold tick_percentage is active when
    the clock reads percentage.  all_percentages lists every tick's
    threshold in index order.'''
    context = ActivationContext(tuple(all_percentages), percentage,
                                tick_percentage)
    return ActivationMode.parse(mode).policy.is_active(context)


class ClockOptions(collections.namedtuple('ClockOptions',
                                          ['canvas_width', 'percentage',
                                           'rectangle', 'range_type',
                                           'overflow', 'arc'])):
    '''Gather every parameter that affects how a clock is drawn.  The arc
    field holds the geometry derived from the canvas width and is computed
    once, at construction.'''
    __slots__ = ()

    def __new__(cls, canvas_width, percentage, rectangle,
                range_type=ActivationMode.CLOSEST, overflow=None):
        if not isinstance(rectangle, RectangleOptions):
            try:
                rectangle = RectangleOptions(**rectangle)
            except TypeError:
                _abend(_('Unexpected rectangle options %s') % repr(rectangle))
        range_type = ActivationMode.parse(range_type)
        if overflow is not None and overflow not in OVERFLOW_VALUES:
            _abend(_('Invalid overflow "%s"') % str(overflow))
        arc = ArcConfiguration(canvas_width, rectangle.height)
        return super().__new__(cls, canvas_width, percentage, rectangle,
                               range_type, overflow, arc)

    @classmethod
    def _make(cls, iterable):
        'Construct a ClockOptions from a sequence, ignoring any stored arc.'
        return cls(*list(iterable)[:5])

    def _replace(self, **kw_args):
        '''Return a copy with some parameters replaced.  The copy is
        validated and its arc is recomputed.'''
        if 'arc' in kw_args:
            _abend(_('The arc is derived from the canvas width and cannot '
                     'be replaced'))
        fields = self._asdict()
        del fields['arc']
        fields.update(kw_args)
        return type(self)(**fields)

    def __getnewargs__(self):
        'Supply the constructor arguments used when copying or pickling.'
        return tuple(self)[:5]


# ----------------------------------------------------------------------

# The following functions lay out the ticks and compute their state.

def polar_to_cartesian(center_x, center_y, radius, angle):
    '''Convert an angle in degrees to an (x, y) point on a circle.  An angle
    of 0 points straight up, -90 points left, and 90 points right.'''
    radians = (angle - 90)*math.pi/180
    return (radius*math.cos(radians) + center_x,
            radius*math.sin(radians) + center_y)


def tick_percentage(index, count):
    '''Return the threshold assigned to the tick at a given index.  The
    index is divided by count, not count - 1, so the final threshold is
    always less than 100.'''
    return math.floor(index/count*100)


def layout(center_x, center_y, radius, tick_count, tick_width, tick_height,
           colors=None):
    '''Distribute tick_count ticks evenly over a 180-degree arc, from -90
    to 90 degrees inclusive, and return them as a list of Ticks.'''
    if not isinstance(tick_count, int):
        _abend(_('The tick count must be an integer, not %s') %
               repr(tick_count))
    if tick_count < 2:
        _abend(_('A clock must contain at least two ticks.'))
    colors = ColorOptions.from_value(colors)
    ticks = []
    for i in range(tick_count):
        angle = i*180/(tick_count - 1) - 90
        center = polar_to_cartesian(center_x, center_y, radius, angle)
        ticks.append(Tick(i, center, angle, tick_percentage(i, tick_count),
                          tick_width, tick_height,
                          colors.fill, colors.active_fill))
    return ticks


def clock_ticks(options):
    'Lay out the ticks described by a ClockOptions.'
    arc = options.arc
    rect = options.rectangle
    return layout(arc.center[0], arc.center[1], arc.radius,
                  rect.count, rect.width, rect.height, rect.colors)


class TickState(collections.namedtuple('TickState', ['tick', 'active'])):
    'Pair a tick with whether it is active.'
    __slots__ = ()

    @property
    def color(self):
        'Return the color in which to fill the tick.'
        return self.tick.color(self.active)


def tick_states(options):
    '''Lay out a clock's ticks and decide which are active.  The result
    depends only on options.'''
    ticks = clock_ticks(options)
    percentages = tuple([t.percentage for t in ticks])
    policy = options.range_type.policy
    states = []
    for t in ticks:
        ctx = ActivationContext(percentages, options.percentage, t.percentage)
        states.append(TickState(t, policy.is_active(ctx)))
    return states


# ----------------------------------------------------------------------

# The following functions convert tick states to SVG.

def tick_rectangle(state):
    'Draw one tick as an inkex.Rectangle.'
    tick = state.tick
    obj = inkex.Rectangle(x=_python_to_svg_str(tick.x),
                          y=_python_to_svg_str(tick.y),
                          width=_python_to_svg_str(tick.width),
                          height=_python_to_svg_str(tick.height))
    # Store the rotation verbatim.  inkex's own set would rewrite it as a
    # six-digit matrix.
    lxml.etree.ElementBase.set(obj, 'transform', tick.rotation)
    obj.style = 'fill:%s' % state.color
    return obj


def clock_group(options, states=None):
    '''Draw a clock as an inkex.Group of rectangles.  states, if provided,
    must have been computed by tick_states from the same options.'''
    if states is None:
        states = tick_states(options)
    grp = inkex.Group()
    grp.label = _('Semi-circular progress clock')
    if options.overflow is not None:
        grp.set('overflow', options.overflow)
    for st in states:
        grp.append(tick_rectangle(st))
    return grp


def clock_document(options):
    'Draw a clock as the root element of a standalone SVG document.'
    arc = options.arc
    doc = inkex.load_svg(_svg_template %
                         (_python_to_svg_str(arc.width),
                          _python_to_svg_str(arc.height)))
    svg = doc.getroot()
    if options.overflow is not None:
        svg.set('overflow', options.overflow)
    for st in tick_states(options):
        svg.append(tick_rectangle(st))
    return svg


def clock_svg(options, pretty_print=False):
    'Draw a clock and return it as a standalone SVG document string.'
    svg = clock_document(options)
    if pretty_print:
        return lxml.etree.tostring(svg,
                                   encoding='unicode',
                                   pretty_print=True)
    return svg.tostring().decode('utf-8')


# ----------------------------------------------------------------------

class SemiCircularProgressClock(inkex.EffectExtension):
    'Draw a semi-circular progress clock into the current layer.'

    def add_arguments(self, pars):
        'Process program parameters passed in from the UI.'
        pars.add_argument('--tab', dest='tab',
                          help='The selected UI tab when OK was pressed')
        pars.add_argument('--canvas-width', type=float, default=400.0,
                          help='Overall width of the clock')
        pars.add_argument('--percentage', type=float, default=0.0,
                          help='Progress value to display')
        pars.add_argument('--rect-width', type=float, default=4.0,
                          help='Width of each tick')
        pars.add_argument('--rect-height', type=float, default=8.0,
                          help='Height of each tick')
        pars.add_argument('--count', type=int, default=27,
                          help='Number of ticks')
        pars.add_argument('--fill', type=str, default=DEFAULT_FILL,
                          help='Color of inactive ticks')
        pars.add_argument('--active-fill', type=str,
                          default=DEFAULT_ACTIVE_FILL,
                          help='Color of active ticks')
        pars.add_argument('--range-type',
                          choices=[m.value for m in ActivationMode],
                          default=ActivationMode.CLOSEST.value,
                          help='Light only the closest tick or every tick '
                               'up to the percentage')
        pars.add_argument('--overflow',
                          choices=['none'] + list(OVERFLOW_VALUES),
                          default='none',
                          help='Whether to clip ticks to the canvas')
        pars.add_argument('--position-x', type=float, default=0.0,
                          help="x coordinate of the clock's upper-left "
                               'corner')
        pars.add_argument('--position-y', type=float, default=0.0,
                          help="y coordinate of the clock's upper-left "
                               'corner')
        pars.add_argument('--verbose', type=inkex.Boolean, default=False,
                          help='Report the computed geometry')

    def clock_options(self):
        'Convert our command-line options to a ClockOptions.'
        opts = self.options
        overflow = opts.overflow
        if overflow == 'none':
            overflow = None
        rect = RectangleOptions(opts.rect_width, opts.rect_height, opts.count,
                                ColorOptions(opts.fill, opts.active_fill))
        return ClockOptions(opts.canvas_width, opts.percentage, rect,
                            opts.range_type, overflow)

    def find_attach_point(self):
        '''Return a suitable point in the SVG XML tree at which to attach
        new objects.'''
        # The Inkscape GUI automatically adds a <sodipodi:namedview> element
        # with an inkscape:current-layer attribute, and this will name either
        # an actual layer or the <svg> element itself.  In this case, we return
        # the layer pointed to by inkscape:current-layer.
        try:
            namedview = self.svg.findone('sodipodi:namedview')
            cur_layer_name = namedview.get('inkscape:current-layer')
            cur_layer = self.svg.xpath('//*[@id="%s"]' % cur_layer_name)[0]
            return cur_layer
        except (AttributeError, IndexError):
            pass

        # If an extension is run from the command line, the input SVG file
        # may lack a <sodipodi:namedview> element or its
        # inkscape:current-layer attribute.  In this case, we return the
        # topmost layer.
        try:
            return self.svg.xpath('//svg:g[@inkscape:groupmode="layer"]')[-1]
        except IndexError:
            pass

        # A very minimal SVG input may contain no layers at all.  In this case,
        # we return the top-level <svg> element.
        return self.svg

    def clip_to_canvas(self, grp, arc):
        "Hide whatever part of a clock group falls outside its canvas."
        clip = inkex.ClipPath()
        clip.append(inkex.Rectangle(x='0', y='0',
                                    width=_python_to_svg_str(arc.width),
                                    height=_python_to_svg_str(arc.height)))
        self.svg.defs.append(clip)
        grp.set('clip-path', clip.get_id(as_url=2))

    def report(self, options, states):
        'Describe the clock we drew on stderr.'
        arc = options.arc
        _debug_print('canvas: %.10g x %.10g' % (arc.width, arc.height))
        _debug_print('arc: center (%.10g, %.10g), radius %.10g' %
                     (arc.center[0], arc.center[1], arc.radius))
        _debug_print('%s at %.10g%%:' % (options.range_type.value,
                                         options.percentage),
                     [st.tick.index for st in states if st.active])

    def effect(self):
        'Draw a clock according to the command-line options.'
        options = self.clock_options()
        states = tick_states(options)
        grp = clock_group(options, states)
        pos_x, pos_y = self.options.position_x, self.options.position_y
        if pos_x != 0 or pos_y != 0:
            tr = inkex.Transform()
            tr.add_translate(pos_x, pos_y)
            grp.transform = tr
        if options.overflow == 'hidden':
            self.clip_to_canvas(grp, options.arc)
        self.find_attach_point().append(grp)
        if self.options.verbose:
            self.report(options, states)


def main():
    SemiCircularProgressClock().run()


if __name__ == '__main__':
    main()
