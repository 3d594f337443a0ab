# SPDX-License-Identifier: MIT


class SegmentType:
    EVENT = "event"
    GAP = "gap"
    COLLAPSED = "collapsed"
