"""oslo.config options for embedding the patroller in a syncer service.

The standalone agent reads YAML (see :mod:`patrol_agent.config`); a syncer
that already uses oslo.config registers these options instead and converts
them with :func:`settings_from_conf`.
"""

from oslo_config import cfg

from vc_patrol.config import PatrolSettings
from vc_patrol.objects import DeletionPolicy

PATROL_GROUP = 'patrol'

patrol_opts = [
    cfg.StrOpt('resource',
               default='storageclass',
               help='Resource type checked by the patroller.'),
    cfg.FloatOpt('period',
                 default=60.0,
                 min=0.1,
                 help='Seconds between two consistency passes.'),
    cfg.FloatOpt('cache_sync_timeout',
                 default=300.0,
                 help='Seconds to wait for informer caches before the '
                      'patroller refuses to start.'),
    cfg.IntOpt('max_workers',
               default=None,
               min=1,
               help='Maximum number of tenant clusters scanned concurrently. '
                    'If not set, every tenant is scanned at once.'),
    cfg.StrOpt('deletion_policy',
               default='Foreground',
               choices=[policy.value for policy in DeletionPolicy],
               help='Propagation policy used when deleting orphan objects '
                    'from tenant clusters.'),
]


def register_patrol_opts(conf=None):
    """Register patrol options in the ``patrol`` group of ``conf``."""
    conf = conf if conf is not None else cfg.CONF
    conf.register_opts(patrol_opts, group=PATROL_GROUP)
    return conf


def settings_from_conf(conf=None):
    """Build :class:`PatrolSettings` from registered oslo options."""
    conf = conf if conf is not None else cfg.CONF
    group = getattr(conf, PATROL_GROUP)
    return PatrolSettings(
        resource=group.resource.lower(),
        period=group.period,
        cache_sync_timeout=group.cache_sync_timeout,
        max_workers=group.max_workers,
        deletion_policy=DeletionPolicy.parse(group.deletion_policy),
    )
