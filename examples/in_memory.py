"""
LazyLoader over an in-memory source, with an explicit iterator.
"""

from lazyloader import LazyLoader, ListDao

loader = LazyLoader(None, ListDao(range(1, 14)), batch_size=5)
print(f"buffered={loader.buffered_count} all_loaded={loader.is_all_loaded()}")

iterator = iter(loader)
while iterator.has_next():
    print(iterator.next())

print(f"buffered={loader.buffered_count} all_loaded={loader.is_all_loaded()}")

# A fresh iterator starts over without fetching again
print(list(loader)[:3])
