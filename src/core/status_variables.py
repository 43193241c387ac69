"""Reference data for SHOW GLOBAL STATUS classification.

New server releases add status variables; extend these sets (or the
EXTRA_STATUS_VARIABLES setting) rather than the classification logic.
Names are lower-case.
"""

__all__ = [
    "BUFFER_POOL_PAGE_STATES",
    "FEATURE_INDICATOR_VARIABLES",
    "GENERIC_STATUS_VARIABLES",
]

# innodb_buffer_pool_pages_<state> values that are levels, not event counts.
BUFFER_POOL_PAGE_STATES = frozenset(("data", "dirty", "free", "misc", "old", "total"))

# Text-valued variables exported as 1 when set and 0 when empty.
FEATURE_INDICATOR_VARIABLES = frozenset(("ssl_version", "ssl_cipher"))

GENERIC_STATUS_VARIABLES = frozenset(
    (
        "aborted_clients",
        "aborted_connects",
        "binlog_cache_disk_use",
        "binlog_cache_use",
        "binlog_stmt_cache_disk_use",
        "binlog_stmt_cache_use",
        "bytes_received",
        "bytes_sent",
        "connections",
        "created_tmp_disk_tables",
        "created_tmp_files",
        "created_tmp_tables",
        "delayed_errors",
        "delayed_insert_threads",
        "delayed_writes",
        "flush_commands",
        "innodb_buffer_pool_bytes_data",
        "innodb_buffer_pool_bytes_dirty",
        "innodb_buffer_pool_read_ahead",
        "innodb_buffer_pool_read_ahead_evicted",
        "innodb_buffer_pool_read_ahead_rnd",
        "innodb_buffer_pool_read_requests",
        "innodb_buffer_pool_reads",
        "innodb_buffer_pool_wait_free",
        "innodb_buffer_pool_write_requests",
        "innodb_data_fsyncs",
        "innodb_data_pending_fsyncs",
        "innodb_data_pending_reads",
        "innodb_data_pending_writes",
        "innodb_data_read",
        "innodb_data_reads",
        "innodb_data_writes",
        "innodb_data_written",
        "innodb_dblwr_pages_written",
        "innodb_dblwr_writes",
        "innodb_log_waits",
        "innodb_log_write_requests",
        "innodb_log_writes",
        "innodb_num_open_files",
        "innodb_os_log_fsyncs",
        "innodb_os_log_pending_fsyncs",
        "innodb_os_log_pending_writes",
        "innodb_os_log_written",
        "innodb_page_size",
        "innodb_pages_created",
        "innodb_pages_read",
        "innodb_pages_written",
        "innodb_row_lock_current_waits",
        "innodb_row_lock_time",
        "innodb_row_lock_time_avg",
        "innodb_row_lock_time_max",
        "innodb_row_lock_waits",
        "key_blocks_not_flushed",
        "key_blocks_unused",
        "key_blocks_used",
        "key_read_requests",
        "key_reads",
        "key_write_requests",
        "key_writes",
        "max_used_connections",
        "not_flushed_delayed_rows",
        "open_files",
        "open_streams",
        "open_table_definitions",
        "open_tables",
        "opened_files",
        "opened_table_definitions",
        "opened_tables",
        "prepared_stmt_count",
        "qcache_free_blocks",
        "qcache_free_memory",
        "qcache_hits",
        "qcache_inserts",
        "qcache_lowmem_prunes",
        "qcache_not_cached",
        "qcache_queries_in_cache",
        "qcache_total_blocks",
        "queries",
        "questions",
        "rpl_semi_sync_master_clients",
        "rpl_semi_sync_master_status",
        "rpl_semi_sync_slave_status",
        "select_full_join",
        "select_full_range_join",
        "select_range",
        "select_range_check",
        "select_scan",
        "slave_open_temp_tables",
        "slave_retried_transactions",
        "slave_running",
        "slow_launch_threads",
        "slow_queries",
        "sort_merge_passes",
        "sort_range",
        "sort_rows",
        "sort_scan",
        "ssl_accepts",
        "ssl_cipher",
        "ssl_finished_accepts",
        "ssl_version",
        "table_locks_immediate",
        "table_locks_waited",
        "table_open_cache_hits",
        "table_open_cache_misses",
        "table_open_cache_overflows",
        "tc_log_page_waits",
        "threads_cached",
        "threads_connected",
        "threads_created",
        "threads_running",
        "uptime",
        "uptime_since_flush_status",
        "wsrep_cluster_size",
        "wsrep_connected",
        "wsrep_local_recv_queue",
        "wsrep_local_send_queue",
        "wsrep_local_state",
        "wsrep_ready",
    )
)
