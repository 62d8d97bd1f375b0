#Textbook comparison sorts used by the benchmark registry.
#
#Every sort takes a list of ints, sorts it ascending in place and returns
#that same list. None of them keep state between calls, so the benchmark
#engine can hand each one a fresh copy and trust that runs are independent.


def insertion_sort(a):
    """
    Insertion sort by adjacent swaps.

    Each new element is swapped towards the front while its left
    neighbour is larger. O(n) on sorted input, O(n^2) otherwise.
    """
    for i in range(1, len(a)):
        j = i
        while j > 0 and a[j - 1] > a[j]:
            a[j], a[j - 1] = a[j - 1], a[j]
            j -= 1
    return a


def selection_sort(a):
    """Selection sort: move the minimum of the unsorted suffix into place."""
    n = len(a)
    for i in range(n - 1):
        smallest = i
        for j in range(i + 1, n):
            if a[j] < a[smallest]:
                smallest = j

        #Skip the self-swap when the minimum is already in place
        if smallest != i:
            a[i], a[smallest] = a[smallest], a[i]
    return a


def bubble_sort(a):
    """
    Bubble sort with early exit.

    Keeps making full passes until one of them performs no swap.
    """
    n = len(a)
    swapped = True
    while swapped:
        swapped = False
        for i in range(1, n):
            if a[i - 1] > a[i]:
                a[i - 1], a[i] = a[i], a[i - 1]
                swapped = True
    return a


#Heap sort

def max_heapify(a, n, i):
    """
    Sift a[i] down so the subtree rooted at i is a max heap.

    Only the first n elements belong to the heap. Assumes both child
    subtrees of i are already max heaps.
    """
    largest = i
    left = 2 * i + 1
    right = 2 * i + 2

    if left < n and a[left] > a[i]:
        largest = left
    if right < n and a[right] > a[largest]:
        largest = right

    #a[i] is not the largest of the three: swap down and keep going there
    if largest != i:
        a[i], a[largest] = a[largest], a[i]
        max_heapify(a, n, largest)


def heap_sort(a):
    """
    Heap sort.

    Builds a max heap in place, then repeatedly swaps the root with the
    last unsorted element and re-heapifies the shrunken heap.
    """
    n = len(a)

    for i in range(n // 2 - 1, -1, -1):
        max_heapify(a, n, i)

    for i in range(n - 1, 0, -1):
        a[0], a[i] = a[i], a[0]
        max_heapify(a, i, 0)
    return a


#Merge sort

def merge_sublists(a, start, middle, end):
    """
    Merge the sorted runs a[start..middle] and a[middle+1..end] (inclusive).

    Each run is copied into its own buffer first. Taking from the left run
    on ties keeps the sort stable.
    """
    left = a[start:middle + 1]
    right = a[middle + 1:end + 1]
    n1, n2 = len(left), len(right)

    i = j = 0
    k = start
    while i < n1 and j < n2:
        if left[i] <= right[j]:
            a[k] = left[i]
            i += 1
        else:
            a[k] = right[j]
            j += 1
        k += 1

    #At most one of the runs still has elements
    while i < n1:
        a[k] = left[i]
        i += 1
        k += 1
    while j < n2:
        a[k] = right[j]
        j += 1
        k += 1


def merge_sort_sublist(a, start, end):
    if start < end:
        middle = start + (end - start) // 2
        merge_sort_sublist(a, start, middle)
        merge_sort_sublist(a, middle + 1, end)
        merge_sublists(a, start, middle, end)


def merge_sort(a):
    """Top-down merge sort, split at the midpoint. Stable, O(n log n)."""
    merge_sort_sublist(a, 0, len(a) - 1)
    return a


#Quick sort

def partition_sublist(a, start, end):
    """
    Lomuto partition of a[start..end] around the pivot a[end].

    Afterwards every element <= pivot sits left of the pivot and every
    larger one sits right of it. Returns the pivot's final index.
    """
    pivot = a[end]
    i = start - 1
    for j in range(start, end):
        if a[j] <= pivot:
            i += 1
            a[i], a[j] = a[j], a[i]

    i += 1
    a[i], a[end] = a[end], a[i]
    return i


def quick_sort(a):
    """
    Quick sort with a last-element pivot.

    No pivot randomisation and no worst-case guard: sorted or reverse
    sorted input degrades to O(n^2), and that is what gets measured.
    Pending subranges live on an explicit stack, so a degenerate
    partition chain as long as the input never hits the recursion limit.
    """
    pending = [(0, len(a) - 1)]
    while pending:
        start, end = pending.pop()
        if start >= end:
            continue
        middle = partition_sublist(a, start, end)
        pending.append((middle + 1, end))
        pending.append((start, middle - 1))
    return a


def shell_sort(a):
    """
    Shell sort with Shell's original gaps: n/2, n/4, ..., 1.
    """
    n = len(a)
    gap = n // 2
    while gap > 0:
        for i in range(gap, n):
            j = i
            while j >= gap and a[j - gap] > a[j]:
                a[j], a[j - gap] = a[j - gap], a[j]
                j -= gap
        gap //= 2
    return a


__all__ = [
    'insertion_sort',
    'selection_sort',
    'bubble_sort',
    'heap_sort',
    'merge_sort',
    'quick_sort',
    'shell_sort',
]
