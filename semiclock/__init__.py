from .semicircular_progress_clock import ActivationContext, \
    ActivationMode, ActivationPolicy, ArcConfiguration, ClockOptions, \
    ClosestPolicy, ColorOptions, ConfigurationError, DEFAULT_ACTIVE_FILL, \
    DEFAULT_FILL, OVERFLOW_VALUES, RangePolicy, RectangleOptions, \
    SemiCircularProgressClock, Tick, TickState, clock_document, clock_group, \
    clock_svg, clock_ticks, is_active, layout, main, polar_to_cartesian, \
    tick_percentage, tick_rectangle, tick_states
